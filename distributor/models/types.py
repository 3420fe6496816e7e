from typing import Union

# type aliases for clarity
EthereumAddress = str
BigNumber = str
Bytes32Hex = str
Bytes32 = bytes
HexOrBytes = Union[str, bytes]

UINT256_MAX = 2**256 - 1
