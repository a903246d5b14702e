"""
Immutable rules of the circle game.

These values define eligibility and payouts.
Changing them changes who wins and MUST be publicly announced.
"""

# Coordinates live on a [1, MAX_AXIS] x [1, MAX_AXIS] grid; 0 means unset
MAX_AXIS = 100_000

# Largest radius the authority may commit
MAX_RADIUS = 100_000

# Payout token uses 18 decimals
TOKEN_DECIMALS = 18

# Fixed amount paid to every winner (raw units)
PAYOUT_AMOUNT = 200 * (10**TOKEN_DECIMALS)  # 200 tokens

ZERO_ADDRESS = "0x0000000000000000000000000000000000000000"
