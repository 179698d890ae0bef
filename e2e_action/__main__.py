from e2e_action.main import cli

cli()
