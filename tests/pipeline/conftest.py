from __future__ import annotations

import pytest


@pytest.fixture
def stablecoin_payload() -> dict:
    return {
        "data": {
            "stableDatas": [
                {
                    "name": "agEUR",
                    "totalMinted": str(1_000_000 * 10**18),
                    "collaterals": [
                        {
                            "collatName": "USDC",
                            "decimals": "6",
                            "stockUser": str(500 * 10**18),
                            "totalHedgeAmount": str(450 * 10**18),
                            "stockSLP": str(200_000 * 10**24),
                            "totalMargin": str(50_000 * 10**6),
                            "totalAsset": str(1_050_000 * 10**6),
                        }
                    ],
                }
            ]
        }
    }
