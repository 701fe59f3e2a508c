from ghref.ghref import cli

cli(prog_name="ghref")
