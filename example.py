#!/usr/bin/env python3
"""
RWA SDK - Usage Example

Demonstrates a transfer, a compliance check and hash reconciliation.
The signing key is read from RWA_SIGNER_KEY and never stored in config.
"""

import os

from rwa_sdk import (
    CheckComplianceRequest,
    ConfirmationTimeout,
    EventType,
    RwaClient,
    RwaError,
    SigningCredential,
    TokenInfoRequest,
    TransferRequest,
)


def main():
    print("=" * 60)
    print("RWA SDK Example")
    print("=" * 60)

    try:
        client = RwaClient.from_config("rwa_config.json")
        print("✓ Client initialized")
    except RwaError as e:
        print(f"✗ Failed to initialize: {e}")
        return

    credential = SigningCredential.from_hex(os.environ["RWA_SIGNER_KEY"])
    sender = credential.address(client.config.address_prefix)
    recipient = os.environ.get("RWA_RECIPIENT", sender)

    @client.on(EventType.AFTER_BROADCAST)
    def on_broadcast(event):
        print(f"  broadcast {event.data['tx_hash']}")

    with client:
        info = client.token_info()
        balance = client.balance(TokenInfoRequest(sender))
        print(f"\n{info.name} ({info.symbol}): {balance.balance} held by {sender}")

        compliance = client.check_compliance(CheckComplianceRequest(recipient))
        if not compliance.compliant:
            print(f"⚠ {recipient} is not compliant, skipping transfer")
            return

        print("\n=== Transfer ===")
        try:
            result = client.transfer(TransferRequest(sender, recipient, 1, 200000, credential))
            print(f"✓ Confirmed at height {result.height}, gas used {result.gas_used}")
        except ConfirmationTimeout as e:
            # The transaction may still land; look it up instead of resending.
            status = client.get_transaction_status(e.tx_hash)
            print(f"… {e.tx_hash} is {status.status.value}")
        except RwaError as e:
            print(f"✗ Transfer failed: {e}")


if __name__ == "__main__":
    main()
