import asyncio
import sys
import os
import httpx
import uvicorn

# Add the project root to sys.path
sys.path.append(os.getcwd())

from src.main import app

async def run_api_test():
    # Wait for server to start
    await asyncio.sleep(2)

    print("\n--- Testing MCP API ---")

    async with httpx.AsyncClient(base_url="http://localhost:3001") as client:
        # 1. Health Check
        print("1. Testing Health Check...")
        res = await client.get("/health")
        print(f"Status Code: {res.status_code}")
        print(f"Response: {res.json()}")

        # 2. Missing tool name
        print("\n2. Testing /mcp/execute without a tool...")
        res = await client.post("/mcp/execute", json={"arguments": {}})
        print(f"{'✅' if res.status_code == 400 else '❌'} Status Code: {res.status_code}")

        # 3. Tool listing
        print("\n3. Testing /mcp/tools...")
        res = await client.get("/mcp/tools", timeout=60.0)
        if res.status_code == 200:
            data = res.json()
            print(f"✅ {len(data['tools'])} tools (source: {data['source']})")
        else:
            print(f"❌ Failed: {res.status_code} - {res.text}")

async def main():
    config = uvicorn.Config(app, port=3001, log_level="error")
    server = uvicorn.Server(config)

    server_task = asyncio.create_task(server.serve())
    test_task = asyncio.create_task(run_api_test())

    await test_task
    # Force exit or cancel
    server.should_exit = True
    await server_task

if __name__ == "__main__":
    try:
        asyncio.run(main())
    except KeyboardInterrupt:
        pass
