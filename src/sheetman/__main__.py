from sheetman.cli import main

main()
