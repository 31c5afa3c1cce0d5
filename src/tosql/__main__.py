from tosql.cli import main

main()
