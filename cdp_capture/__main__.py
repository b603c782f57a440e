from cdp_capture.cli import main

main()
