from meterreader.app import main

main()
