import asyncio
import os
from sdk.octa_client import OctaClient

async def toggle(client, commission_id, n):
    r = await client.toggle_commission_async(commission_id)
    if r.status_code == 200:
        print(f"✅ toggle #{n}: active={r.json()['commission']['active']}")
    elif r.status_code == 404:
        print(f"❌ toggle #{n}: commission not found")
    else:
        print(f"❌ toggle #{n} failed with HTTP {r.status_code}: {r.text}")

async def main():
    c = OctaClient(base_url=os.getenv("OCTA_URL", "http://127.0.0.1:8080"))
    c.login(os.getenv("OCTA_USER", "admin"), os.getenv("OCTA_PASSWORD", "admin"))

    product = c.add_product("Gaming Laptop", "16GB RAM", 1499.0)
    commission = c.add_commission(product["_id"], 7.5)
    print(f"\n🖥️  Commission {commission['_id']} starts active={commission['active']}")

    # Toggles are independent read-modify-write requests; nothing orders them.
    print("\n⚡ Sending 4 concurrent status toggles...")
    await asyncio.gather(*(toggle(c, commission["_id"], n) for n in range(1, 5)))

    print("\n📦 Final commission state:", c.get_commission(commission["_id"]))

if __name__ == "__main__":
    asyncio.run(main())
