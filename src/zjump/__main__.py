from zjump.cli import main

main()
