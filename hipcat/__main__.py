from hipcat.cli import run

run()
