REPOSPEC = "<REPOSPEC>"
"""A concise reference to a GitHub repository, used to resolve a downloadable archive.

REPOSPEC has the format ``[username/]repo[/subdir][@ref|#pull|@*release]``:

* ``username/repo`` for the default branch of a repository.
* ``username/repo/subdir`` for a subdirectory of a repository.
* ``username/repo@ref`` for a branch name, tag, or commit hash.
* ``username/repo#123`` for the head branch of a pull request.
* ``username/repo@*release`` for the tag of the latest release.

The username may be omitted if it is provided with ``--username`` or in the
configuration file, but this is deprecated.
"""

REFSPEC = "<REFSPEC>"
"""The fallback reference used when a REPOSPEC does not include one.

REFSPEC can be any of the following:

* A branch name, tag, or commit hash.
* ``#<number>`` for the head branch of a pull request.
* ``*release`` for the tag of the latest release.

A reference included in the REPOSPEC always takes precedence.
"""
