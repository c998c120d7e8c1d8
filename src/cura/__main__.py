from cura.cli import main

main()
