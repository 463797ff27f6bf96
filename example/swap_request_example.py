from smart_account_v1.providers.evm import (
    SmartAccountV1Provider,
    CreateSwapRequestInput,
    InitSmartAccountV1Input,
    SinglePathSwapInput,
    sign_user_op_hash,
    sign_typed_data_request,
)
import logging
import time

logging.basicConfig(level=logging.INFO)

rpc_url = "https://ethereum-sepolia-rpc.publicnode.com"
owner_pk = "0xxxx"  # Replace with the smart account owner's private key
owner = "0xxxx"     # Replace with the owner's address

WETH = "0xfFf9976782d46CC05630D1f6eBAb18b2324d6B14"
USDC = "0x1c7D4B196Cb0C7B01d743Fbc6116a902379C7238"


async def main():
    provider = await SmartAccountV1Provider.from_rpc_url(rpc_url)
    salt = int(time.time() * 1000)

    # Deploy the wallet and swap 0.0001 WETH into USDC in one operation
    output = await provider.create_swap_request(
        CreateSwapRequestInput(
            order_id=0,
            dex="uniswapV3",
            gasless=True,
            swap_input=SinglePathSwapInput(
                token_in=WETH,
                token_out=USDC,
                fee=3000,
                deadline=2**255,
                amount_in=10**14,
                amount_out_minimum=0,
            ),
            init_smart_account_input=InitSmartAccountV1Input(owner=owner, salt=salt),
        )
    )
    print("Smart account:", output.smart_account)
    print("UserOpHash:", output.user_op_hash)

    signature = sign_user_op_hash(owner_pk, output.user_op_hash)
    print("Signed user operation:", output.request.with_signature(signature).to_rpc())

    # Authorize a fresh session key for the same wallet
    session = await provider.create_session_key_request(owner, salt)
    permit_signature = sign_typed_data_request(owner_pk, session.request)
    print("Session key:", session.session_key.address)
    print("Permit signature:", permit_signature)


if __name__ == "__main__":
    import asyncio
    asyncio.run(main())
