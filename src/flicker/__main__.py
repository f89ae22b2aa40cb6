from flicker.cli.commands import app

app(prog_name="flicker")
