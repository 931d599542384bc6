from train.cli.app import main

main()
