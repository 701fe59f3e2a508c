import typing as t


def format_columns(
    data: t.Union[t.Mapping[str, t.Any], t.Iterable[t.Tuple[str, t.Any]]], sep="\t"
) -> str:
    """Align the values of `data` into a column after its keys.

    `data` can be a mapping or a sequence of pairs, which may repeat keys."""
    rows = list(data.items() if isinstance(data, t.Mapping) else data)
    if not rows:
        return ""
    width = max(len(str(key)) for key, _ in rows)
    return "\n".join(f"{str(key):<{width}}{sep}{value}" for key, value in rows)


def format_secret(value: t.Optional[str]) -> t.Optional[str]:
    """Obscure all but the last four characters of a token."""
    if not value:
        return value
    if len(value) <= 4:
        return "*" * len(value)
    return "*" * (len(value) - 4) + value[-4:]
