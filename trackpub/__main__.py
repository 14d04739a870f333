from trackpub.cli.app import main

main()
