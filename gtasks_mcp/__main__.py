from gtasks_mcp.server import main

main()
