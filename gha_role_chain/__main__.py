from .cli import main

main(prog_name="gha-role-chain")
