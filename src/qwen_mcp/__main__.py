from qwen_mcp.main import main

main()
