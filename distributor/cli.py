import logging
from typing import Optional

import fire

from distributor.config import load_conf, load_conf_and_distribution, load_distribution
from distributor.distributor import MerkleDistributor
from distributor.env import SETTLEMENT, env_var
from distributor.errors import BadConfigException, ClaimError, TransferPendingError
from distributor.models import SignatureAuthorization
from distributor.signature import address_of, sign_message_hash
from distributor.token import Web3Token
from distributor.typed_message import MessageHasher
from distributor.utils import to_hex, write_json, yes_or_no

DEFAULT_CONFIG = "distributor.json"
DEFAULT_DISTRIBUTION = "merkle-tree.json"


def message_hash(account: str, amount: int, config: str = DEFAULT_CONFIG) -> str:
    """Print the typed message hash an account must sign for a relayed claim"""
    conf = load_conf(config)
    digest = to_hex(MessageHasher(conf.domain).get_message_hash(account, int(amount)))
    print(f"🔏 Message hash for {account} / {amount}: {digest}")
    return digest


def sign(
    account: str,
    amount: int,
    key: Optional[str] = None,
    config: str = DEFAULT_CONFIG,
    out: Optional[str] = None,
) -> str:
    """Sign a claim authorization. The key must belong to `account`"""
    conf = load_conf(config)
    key = key or env_var("SIGNER_PRIVATE_KEY")
    if address_of(key).lower() != account.lower():
        raise BadConfigException(f"Key does not belong to {account}")

    digest = MessageHasher(conf.domain).get_message_hash(account, int(amount))
    auth = sign_message_hash(key, digest)
    print(f"🔐 Signature: {auth.to_hex()}")

    if out:
        write_json(
            {
                "account": account,
                "amount": str(amount),
                "v": auth.v,
                "r": to_hex(auth.r),
                "s": to_hex(auth.s),
            },
            out,
        )
    return auth.to_hex()


def verify(distribution: str = DEFAULT_DISTRIBUTION) -> bool:
    """Check every proof in a distribution file against its own root"""
    tree = load_distribution(distribution)
    invalid = tree.invalid_claims()

    print(f"Claims in distribution: {len(tree.claims)}")
    print(f"Invalid proofs: {len(invalid)}")
    for account in invalid:
        print(f"❌ {account}")
    if not invalid:
        print(f"😃 All proofs verify against {tree.merkleRoot}")
    return not invalid


def _distributor(config: str, distribution: str):
    conf, tree = load_conf_and_distribution(config, distribution)
    if not conf.token:
        raise BadConfigException("No token address configured")

    sender_key = env_var(SETTLEMENT.SENDER_KEY)
    token = Web3Token.from_rpc(env_var(SETTLEMENT.RPC_URL), conf.token, sender_key)
    return MerkleDistributor.from_config(conf, token), tree, sender_key


def relay(
    account: str,
    signature: str,
    config: str = DEFAULT_CONFIG,
    distribution: str = DEFAULT_DISTRIBUTION,
    yes: bool = False,
) -> bool:
    """Submit a signed claim on behalf of `account`, paying gas from the sender key"""
    distributor, tree, _ = _distributor(config, distribution)
    try:
        entry = tree.claim_for(account)
    except KeyError:
        print(f"🤷 {account} is not in the distribution")
        return False
    auth = SignatureAuthorization.from_bytes(signature)

    if not yes and not yes_or_no(f"Relay claim of {entry.amount} for {account}?"):
        return False

    try:
        distributor.claim(
            account, int(entry.amount), entry.proof_bytes, auth.v, auth.r, auth.s
        )
    except TransferPendingError as e:
        print(f"⏳ Transfer sent but unconfirmed, check tx {e.tx_hash} before retrying")
        return False
    except ClaimError as e:
        print(f"🚫 Claim refused: {e.kind} ({e})")
        return False

    print(f"🚀 Claimed {entry.amount} for {account}")
    return True


def claim(
    config: str = DEFAULT_CONFIG,
    distribution: str = DEFAULT_DISTRIBUTION,
    yes: bool = False,
) -> bool:
    """Claim the sender's own allocation"""
    distributor, tree, sender_key = _distributor(config, distribution)
    caller = address_of(sender_key)
    try:
        entry = tree.claim_for(caller)
    except KeyError:
        print(f"🤷 {caller} is not in the distribution")
        return False

    if not yes and not yes_or_no(f"Claim {entry.amount} for {caller}?"):
        return False

    try:
        distributor.claim_direct(caller, int(entry.amount), entry.proof_bytes)
    except TransferPendingError as e:
        print(f"⏳ Transfer sent but unconfirmed, check tx {e.tx_hash} before retrying")
        return False
    except ClaimError as e:
        print(f"🚫 Claim refused: {e.kind} ({e})")
        return False

    print(f"🚀 Claimed {entry.amount} for {caller}")
    return True


def main():
    logging.basicConfig(level=logging.INFO, format="%(levelname)s %(name)s: %(message)s")
    fire.Fire(
        {
            "hash": message_hash,
            "sign": sign,
            "verify": verify,
            "relay": relay,
            "claim": claim,
        }
    )


if __name__ == "__main__":
    main()
