"""ABI fragments of the AchievementNFT (ERC-1155) contract used off-chain."""

MINT_EVENT_SIGNATURE = "AchievementMinted(address,uint256,uint32,string)"

ACHIEVEMENT_NFT_ABI = [
    {
        "type": "event",
        "name": "AchievementMinted",
        "anonymous": False,
        "inputs": [
            {"name": "owner", "type": "address", "indexed": True},
            {"name": "tokenId", "type": "uint256", "indexed": True},
            {"name": "appId", "type": "uint32", "indexed": False},
            {"name": "achievementApiName", "type": "string", "indexed": False},
        ],
    },
    {
        "type": "function",
        "name": "mint",
        "stateMutability": "nonpayable",
        "inputs": [
            {"name": "to", "type": "address"},
            {"name": "tokenId", "type": "uint256"},
            {"name": "appId", "type": "uint32"},
            {"name": "achievementApiName", "type": "string"},
            {"name": "data", "type": "bytes"},
        ],
        "outputs": [],
    },
]
