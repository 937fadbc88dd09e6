from jvt.app import main

main()
