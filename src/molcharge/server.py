from mcp.server.fastmcp import FastMCP

# All tools we want to expose via the MCP server
from molcharge.infrastructure.resources import get_all_resources_tools
from molcharge.tools.cleaning import get_all_charge_tools

# create an MCP server
mcp = FastMCP("molcharge")

# Add resource management tools
for tool_func in get_all_resources_tools():
    mcp.add_tool(tool_func)

# Add charge standardization tools
for tool_func in get_all_charge_tools():
    mcp.add_tool(tool_func)


def main():
    mcp.run()


if __name__ == "__main__":
    main()
