"""Static chain and token metadata."""

from typing import Any, Dict, List, Tuple

MULTICALL3 = "0xcA11bde05977b3631167028862bE2a173976CA11"

# chain_id -> (key, name, symbol, native name, rpc, explorer, multicall,
#              coingecko platform, coingecko native coin id, covalent slug)
_CHAIN_ROWS: Dict[int, Tuple[Any, ...]] = {
    1: ("ethereum", "Ethereum", "ETH", "Ether", "https://eth.llamarpc.com", "https://etherscan.io", MULTICALL3, "ethereum", "ethereum", "eth-mainnet"),
    10: ("optimism", "Optimism", "ETH", "Ether", "https://optimism.llamarpc.com", "https://optimistic.etherscan.io", MULTICALL3, "optimistic-ethereum", "ethereum", "optimism-mainnet"),
    14: ("flare", "Flare", "FLR", "Flare", "https://flare-api.flare.network/ext/C/rpc", "https://flare-explorer.flare.network", MULTICALL3, "flare", "flare-networks", None),
    40: ("telos", "Telos", "TLOS", "Telos", "https://mainnet.telos.net/evm", "https://teloscan.io", MULTICALL3, "telos", "telos", None),
    50: ("xdc", "XDC Network", "XDC", "XDC Network", "https://rpc.xinfin.network", "https://explorer.xinfin.network", MULTICALL3, "xdc", "xdce-crowd-sale", None),
    56: ("bsc", "BNB Smart Chain", "BNB", "BNB", "https://bsc-dataseed.binance.org", "https://bscscan.com", MULTICALL3, "binance-smart-chain", "binancecoin", "bsc-mainnet"),
    57: ("syscoin", "Syscoin", "SYS", "Syscoin", "https://rpc.syscoin.org", "https://explorer.syscoin.org", MULTICALL3, "syscoin", "syscoin", None),
    61: ("ethereum-classic", "Ethereum Classic", "ETC", "Ethereum Classic", "https://etc.rivet.link", "https://blockscout.com/etc/mainnet", MULTICALL3, "ethereum-classic", "ethereum-classic", None),
    100: ("gnosis", "Gnosis Chain", "xDAI", "xDAI", "https://rpc.gnosis.gateway.fm", "https://gnosisscan.io", MULTICALL3, "xdai", "xdai", "gnosis-mainnet"),
    122: ("fuse", "Fuse Network", "FUSE", "Fuse", "https://rpc.fuse.io", "https://explorer.fuse.io", None, "fuse", "fuse", None),
    130: ("unichain", "Unichain", "ETH", "Ether", "https://rpc.unichain.org", "https://uniscan.xyz", MULTICALL3, "unichain", "ethereum", None),
    137: ("polygon", "Polygon PoS", "MATIC", "Polygon", "https://polygon.llamarpc.com", "https://polygonscan.com", MULTICALL3, "polygon-pos", "matic-network", "polygon-mainnet"),
    146: ("sonic", "Sonic", "S", "Sonic", "https://rpc.soniclabs.com", "https://sonicscan.org", None, "sonic", "sonic", None),
    195: ("x1", "X1", "X1", "X1", None, None, None, None, None, "x1-mainnet"),
    250: ("fantom", "Fantom Opera", "FTM", "Fantom", "https://rpc.fantom.network", "https://ftmscan.com", MULTICALL3, "fantom", "fantom", "fantom-mainnet"),
    324: ("zksync", "zkSync Mainnet", "ETH", "Ether", "https://rpc.ankr.com/zksync_era", "https://explorer.zksync.io", None, None, None, None),
    480: ("worldchain", "World Chain", "ETH", "Ether", "https://worldchain-mainnet.g.alchemy.com/public", "https://worldchain-mainnet.explorer.alchemy.com", None, "worldcoin", "worldcoin", None),
    1135: ("lisk", "Lisk", "ETH", "Ether", "https://rpc.api.lisk.com", "https://blockscout.lisk.com", None, "lisk", "lisk", None),
    1284: ("moonbeam", "Moonbeam", "GLMR", "Glimmer", "https://rpc.api.moonbeam.network", "https://moonscan.io", MULTICALL3, "moonbeam", "moonbeam", None),
    1285: ("moonriver", "Moonriver", "MOVR", "Moonriver", "https://rpc.api.moonriver.moonbeam.network", "https://moonriver.moonscan.io", MULTICALL3, "moonriver", "moonriver", None),
    1329: ("sei", "Sei Network", "SEI", "Sei", "https://evm-rpc.sei-apis.com", "https://seitrace.com", MULTICALL3, "sei-network", "sei-network", "sei-mainnet"),
    1868: ("soneium", "Soneium", "ETH", "Ether", "https://soneium.drpc.org", "https://mainnet-explorer.soneium.org", None, "soneium", "soneium", None),
    1923: ("swellchain", "Swellchain", "ETH", "Ether", "https://swell-mainnet.alt.technology", "https://explorer.swellnetwork.io", None, "swellchain", "swellchain", None),
    2741: ("abstract", "Abstract", "ETH", "Ether", "https://api.mainnet.abs.xyz", "https://abscan.org", None, "abstract", "abstract", None),
    5000: ("mantle", "Mantle", "MNT", "Mantle", "https://rpc.mantle.xyz", "https://explorer.mantlenetwork.io", MULTICALL3, "mantle", "mantle", None),
    7777777: ("zora", "Zora", "ETH", "Ether", "https://rpc.zora.energy", "https://explorer.zora.energy", MULTICALL3, "zora", "ethereum", "zora-mainnet"),
    8453: ("base", "Base", "ETH", "Ether", "https://mainnet.base.org", "https://basescan.org", MULTICALL3, "base", "ethereum", "base-mainnet"),
    9745: ("plasma", "Plasma Mainnet", "XPL", "Plasma", "https://rpc.plasma.xyz", "https://plasmascan.to", MULTICALL3, None, None, None),
    34443: ("mode", "Mode", "ETH", "Ether", "https://mainnet.mode.network", "https://modescan.io", MULTICALL3, "mode", "ethereum", "mode-mainnet"),
    42161: ("arbitrum", "Arbitrum One", "ETH", "Ether", "https://arb1.arbitrum.io/rpc", "https://arbiscan.io", MULTICALL3, "arbitrum-one", "ethereum", "arbitrum-mainnet"),
    42220: ("celo", "Celo Mainnet", "CELO", "Celo", "https://forno.celo.org", "https://celoscan.io", MULTICALL3, "celo", "celo", None),
    43114: ("avalanche", "Avalanche C-Chain", "AVAX", "Avalanche", "https://api.avax.network/ext/bc/C/rpc", "https://snowscan.xyz", MULTICALL3, "avalanche", "avalanche-2", "avalanche-mainnet"),
    57073: ("ink", "Inkonchain", "ETH", "Ether", "https://rpc.inkonchain.com", "https://explorer.inkonchain.com", MULTICALL3, "inkonchain", "inkonchain", None),
    59144: ("linea", "Linea", "ETH", "Ether", "https://rpc.linea.build", "https://lineascan.build", MULTICALL3, "linea", "ethereum", "linea-mainnet"),
    60808: ("bob", "BOB Mainnet", "ETH", "Ether", "https://rpc.gobob.xyz", "https://explorer.gobob.xyz", None, "bob", "bob", None),
    80094: ("berachain", "Berachain", "BERA", "Berachain", "https://rpc.berachain.com", "https://berascan.com", MULTICALL3, None, None, "berachain-bartio"),
    81457: ("blast", "Blast Mainnet", "ETH", "Ether", "https://rpc.blast.io", "https://blastscan.io", None, "blast", "blast", None),
    747474: ("katana", "Katana", "ETH", "Ether", "https://rpc.katana.network", "https://explorer.katanarpc.com", None, "katana", "katana", None),
    1313161554: ("aurora", "Aurora Mainnet", "ETH", "Ether", "https://mainnet.aurora.dev", "https://aurorascan.dev", MULTICALL3, "aurora", "ethereum", None),
}

CHAIN_FIELDS = (
    "key",
    "name",
    "symbol",
    "native_name",
    "rpc_url",
    "explorer_url",
    "multicall_address",
    "coingecko_platform",
    "coingecko_native_id",
    "covalent_slug",
)

CHAIN_METADATA: Dict[int, Dict[str, Any]] = {
    chain_id: dict(zip(CHAIN_FIELDS, row)) for chain_id, row in _CHAIN_ROWS.items()
}

TOKENLIST_SOURCES: Dict[int, List[str]] = {
    1: ["https://tokens.uniswap.org", "https://api.1inch.io/v5.0/1/tokens"],
    10: ["https://api.1inch.io/v5.0/10/tokens"],
    56: ["https://api.1inch.io/v5.0/56/tokens"],
    100: ["https://tokens.coingecko.com/xdai/all.json"],
    137: ["https://api.1inch.io/v5.0/137/tokens"],
    250: ["https://tokens.coingecko.com/fantom/all.json"],
    34443: ["https://raw.githubusercontent.com/mode-network/asset-list/main/list.json"],
    42161: ["https://api.1inch.io/v5.0/42161/tokens"],
    43114: ["https://tokens.coingecko.com/avalanche/all.json"],
    8453: ["https://api.1inch.io/v5.0/8453/tokens"],
    59144: ["https://raw.githubusercontent.com/Consensys/linea-token-list/main/build/linea-mainnet.json"],
    7777777: ["https://raw.githubusercontent.com/zora-community/token-list/main/zora.tokenlist.json"],
    80094: ["https://raw.githubusercontent.com/Berachain/token-list/main/bera.tokenlist.json"],
    130: ["https://raw.githubusercontent.com/unichain/token-list/main/unichain.tokenlist.json"],
    42220: ["https://tokens.coingecko.com/celo/all.json"],
    1313161554: ["https://raw.githubusercontent.com/aurora-is-near/bridge-assets/master/aurora.tokenlist.json"],
    1284: ["https://raw.githubusercontent.com/moonbeam-foundation/moonbeam-token-list/main/tokens/moonbeam.json"],
    1285: ["https://raw.githubusercontent.com/moonbeam-foundation/moonbeam-token-list/main/tokens/moonriver.json"],
    5000: ["https://raw.githubusercontent.com/mantlenetworkio/mantle-token-list/main/mantle.tokenlist.json"],
    1329: ["https://raw.githubusercontent.com/sei-protocol/token-list/main/sei.tokenlist.json"],
    9745: ["https://raw.githubusercontent.com/plasma-network/token-list/main/plasma.tokenlist.json"],
    14: ["https://raw.githubusercontent.com/flare-labs/token-list/main/flare.tokenlist.json"],
}

# Curated majors swept on every chain even when list sources are unreachable.
# (address, symbol, name, decimals, is_native_wrapped, is_stablecoin)
CURATED_TOKENS: Dict[int, List[Tuple[str, str, str, int, bool, bool]]] = {
    1: [
        ("0xA0b86991c6218b36c1d19D4a2e9Eb0cE3606eB48", "USDC", "USD Coin", 6, False, True),
        ("0xdAC17F958D2ee523a2206206994597C13D831ec7", "USDT", "Tether USD", 6, False, True),
        ("0x6B175474E89094C44Da98b954EedeAC495271d0F", "DAI", "Dai Stablecoin", 18, False, True),
        ("0xC02aaA39b223FE8D0A0e5C4F27eAD9083C756Cc2", "WETH", "Wrapped Ether", 18, True, False),
        ("0x2260FAC5E5542a773Aa44fBCfeDf7C193bc2C599", "WBTC", "Wrapped BTC", 8, False, False),
    ],
    10: [
        ("0x0b2C639c533813f4Aa9D7837CAf62653d097Ff85", "USDC", "USD Coin", 6, False, True),
        ("0x94b008aA00579c1307B0EF2c499aD98a8ce58e58", "USDT", "Tether USD", 6, False, True),
        ("0xDA10009cBd5D07dd0CeCc66161FC93D7c9000da1", "DAI", "Dai Stablecoin", 18, False, True),
        ("0x4200000000000000000000000000000000000006", "WETH", "Wrapped Ether", 18, True, False),
    ],
    56: [
        ("0x8AC76a51cc950d9822D68b83fE1Ad97B32Cd580d", "USDC", "USD Coin", 18, False, True),
        ("0x55d398326f99059fF775485246999027B3197955", "USDT", "Tether USD", 18, False, True),
        ("0xbb4CdB9CBd36B01bD1cBaEBF2De08d9173bc095c", "WBNB", "Wrapped BNB", 18, True, False),
    ],
    100: [
        ("0xDDAfbb505ad214D7b80b1f830fcCc89B60fb7A83", "USDC", "USD Coin", 6, False, True),
        ("0xe91D153E0b41518A2Ce8Dd3D7944Fa863463a97d", "WXDAI", "Wrapped xDAI", 18, True, True),
    ],
    137: [
        ("0x3c499c542cEF5E3811e1192ce70d8cC03d5c3359", "USDC", "USD Coin", 6, False, True),
        ("0xc2132D05D31c914a87C6611C10748AEb04B58e8F", "USDT", "Tether USD", 6, False, True),
        ("0x8f3Cf7ad23Cd3CaDbD9735AFf958023239c6A063", "DAI", "Dai Stablecoin", 18, False, True),
        ("0x0d500B1d8E8eF31E21C99d1Db9A6444d3ADf1270", "WMATIC", "Wrapped Matic", 18, True, False),
        ("0x7ceB23fD6bC0adD59E62ac25578270cFf1b9f619", "WETH", "Wrapped Ether", 18, False, False),
    ],
    8453: [
        ("0x833589fCD6eDb6E08f4c7C32D4f71b54bdA02913", "USDC", "USD Coin", 6, False, True),
        ("0x50c5725949A6F0c72E6C4a641F24049A917DB0Cb", "DAI", "Dai Stablecoin", 18, False, True),
        ("0x4200000000000000000000000000000000000006", "WETH", "Wrapped Ether", 18, True, False),
    ],
    42161: [
        ("0xaf88d065e77c8cC2239327C5EDb3A432268e5831", "USDC", "USD Coin", 6, False, True),
        ("0xFd086bC7CD5C481DCC9C85ebE478A1C0b69FCbb9", "USDT", "Tether USD", 6, False, True),
        ("0xDA10009cBd5D07dd0CeCc66161FC93D7c9000da1", "DAI", "Dai Stablecoin", 18, False, True),
        ("0x82aF49447D8a07e3bd95BD0d56f35241523fBab1", "WETH", "Wrapped Ether", 18, True, False),
    ],
    43114: [
        ("0xB97EF9Ef8734C71904D8002F8b6Bc66Dd9c48a6E", "USDC", "USD Coin", 6, False, True),
        ("0x9702230A8Ea53601f5cD2dc00fDBc13d4dF4A8c7", "USDT", "Tether USD", 6, False, True),
        ("0xB31f66AA3C1e785363F0875A1B74E27b85FD66c7", "WAVAX", "Wrapped AVAX", 18, True, False),
    ],
    59144: [
        ("0x176211869cA2b568f2A7D4EE941E073a821EE1ff", "USDC", "USD Coin", 6, False, True),
        ("0xe5D7C2a44FfDDf6b295A15c148167daaAf5Cf34f", "WETH", "Wrapped Ether", 18, True, False),
    ],
}

BRIDGE_TOKEN_SYMBOLS = ("USDC", "USDT", "DAI")

CHAIN_ALIAS_EXPANSIONS: Dict[str, List[str]] = {
    "ethereum": ["eth", "mainnet", "l1"],
    "arbitrum": ["arb", "arbitrum one"],
    "optimism": ["op"],
    "polygon": ["matic", "polygon pos"],
    "bsc": ["bnb", "binance"],
    "avalanche": ["avax"],
    "gnosis": ["xdai"],
}
