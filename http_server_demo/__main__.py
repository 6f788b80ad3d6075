from http_server_demo.main import main


main()
