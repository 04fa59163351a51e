from rcalc.cli import main

main()
