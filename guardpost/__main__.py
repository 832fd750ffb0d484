from guardpost.server import main

main()
