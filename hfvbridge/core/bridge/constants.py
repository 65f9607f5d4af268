"""Static ABI surface used by the bridge subsystem."""

# Router (read)
QUOTE_BRIDGE_SIGNATURE = "quoteBridge(address,uint256,uint256,address)"
QUOTE_BRIDGE_ARGS = ["address", "uint256", "uint256", "address"]
# (dstAmount, feeAmount, gasUsd); gasUsd is 18-decimal fixed point
QUOTE_BRIDGE_RESULT = ["uint256", "uint256", "uint256"]
GAS_USD_DECIMALS = 18

# Router (payable write)
BRIDGE_TOKEN_SIGNATURE = "bridgeToken(address,uint256,uint256,address)"
BRIDGE_TOKEN_ARGS = ["address", "uint256", "uint256", "address"]

# ERC-20 allowance handling for the router
ALLOWANCE_SIGNATURE = "allowance(address,address)"
ALLOWANCE_ARGS = ["address", "address"]
APPROVE_SIGNATURE = "approve(address,uint256)"
APPROVE_ARGS = ["address", "uint256"]

HOSTED_QUOTE_PREFIX = "hosted"
ONCHAIN_QUOTE_PREFIX = "onchain"

# Gas units held back for bridgeToken while an approve is still pending;
# the real estimate is only possible once the allowance exists
BRIDGE_GAS_RESERVE = 300_000
