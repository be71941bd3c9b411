from relman.cli.app import main

main()
