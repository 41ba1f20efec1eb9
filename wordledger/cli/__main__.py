from wordledger.cli.main import main

main()
