"""Well-known wallet owners."""

# House account; conversion and facilitation fees are credited to its
# wallet in the program the fee was charged in.
PLATFORM_FEE_USER_ID = "PLATFORM_FEE"
