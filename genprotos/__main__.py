from genprotos.main import main

main()
