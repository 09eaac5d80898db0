from splunk_cli.cli import main

main()
