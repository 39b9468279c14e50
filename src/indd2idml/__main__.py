from .cli import app

app(prog_name="indd2idml")
