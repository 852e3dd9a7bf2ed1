import asyncio
import sys
import os

# Add the project root to sys.path
sys.path.append(os.getcwd())

from src.bridge import McpBridge, BridgeError
from src.config import settings

# Connection details for a real Sitecore instance, taken from the environment
ARGUMENTS = {
    "instanceUrl": os.environ.get("SMOKE_SITECORE_URL", "https://cm.example.localhost"),
    "username": os.environ.get("SMOKE_SITECORE_USERNAME", "admin"),
    "password": os.environ.get("SMOKE_SITECORE_PASSWORD", "b"),
    "path": "/sitecore/content/Home",
}

async def main():
    print("\n--- Testing MCP Bridge ---")
    print(f"Command: {' '.join(settings.MCP_COMMAND)}")
    bridge = McpBridge.from_settings(settings)

    try:
        print("1. Listing tools...")
        listing = await bridge.list_tools()
        print(f"✅ {len(listing.tools)} tools (source: {listing.source})")
        for tool in listing.tools:
            print(f"   - {tool.name}: {tool.description}")
    except BridgeError as e:
        print(f"❌ ERROR: {e}")

    try:
        print("\n2. Calling item-service-get-item...")
        result = await bridge.execute_tool("item-service-get-item", ARGUMENTS)
        print(f"✅ Result: {result}")
    except BridgeError as e:
        print(f"❌ ERROR: {e}")

if __name__ == "__main__":
    try:
        asyncio.run(main())
    except KeyboardInterrupt:
        pass
