"""Gas and deposit budgets attached to governed requests.

Every gas figure is a multiple of ``TGAS``. Attaching too little gas fails
late on-chain, so budgets live here rather than at call sites.
"""

TGAS = 10**12

MAX_TRANSACTION_GAS = 300 * TGAS

# Outer ``add_request`` calls.
ADD_REQUEST_GAS = 300 * TGAS
DEFI_REQUEST_GAS = 100 * TGAS
STABLE_LIQUIDITY_REQUEST_GAS = 200 * TGAS

# Inner actions carried by a request.
DEFI_CALL_GAS = 50 * TGAS
STABLE_LIQUIDITY_CALL_GAS = 100 * TGAS
WITHDRAW_CALL_GAS = 200 * TGAS
LOCKUP_CALL_GAS = 250 * TGAS

# Direct calls on the multisig contract.
CONFIRM_GAS = 100 * TGAS
DELETE_REQUEST_GAS = 25 * TGAS

NEAR_DECIMALS = 24
ONE_NEAR = 10**NEAR_DECIMALS
ONE_YOCTO = 1

REF_STORAGE_DEPOSIT = 125 * 10**21  # 0.125 NEAR
REF_WITHDRAW_STORAGE_DEPOSIT = 5 * 10**21  # 0.005 NEAR
REF_ADD_LIQUIDITY_DEPOSIT = 10 * 10**21  # 0.01 NEAR
BURROW_STORAGE_DEPOSIT = 250 * 10**21  # 0.25 NEAR
