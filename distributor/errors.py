class ClaimError(Exception):
    """
    Base class for every reason a claim is refused.
    `kind` is a stable identifier off-chain callers can branch on.
    """

    kind = "ClaimError"


class AlreadyClaimedError(ClaimError):
    """Raise if the account has already settled its claim. Retrying won't help"""

    kind = "AlreadyClaimed"


class InvalidSignatureError(ClaimError):
    """Raise if the signature does not recover to the claiming account"""

    kind = "InvalidSignature"


class InvalidProofError(ClaimError):
    """Raise if the merkle proof does not connect the leaf to the root"""

    kind = "InvalidProof"


class TransferFailedError(ClaimError):
    """Raise if the token refused the transfer. The claim is rolled back"""

    kind = "TransferFailed"


class TransferPendingError(ClaimError):
    """
    Raise if the transfer was broadcast but its outcome could not be confirmed.
    The claim stays marked, since the payout may still land.
    """

    kind = "TransferPending"

    def __init__(self, account, tx_hash: str = ""):
        super().__init__(f"{account} (tx {tx_hash})" if tx_hash else account)
        self.account = account
        self.tx_hash = tx_hash


class BadConfigException(Exception):
    pass


class MissingEnvironmentVariableException(Exception):
    pass
