"""
Static interface description of the sale and token contracts.

The descriptor is the only place that knows method/event names, argument
types and return types. The gateway asks it to encode calldata and to decode
return data, so a renamed or missing entry fails loudly here instead of as a
bad type assertion further down.
"""
from dataclasses import dataclass
from enum import Enum
from typing import Any

from eth_abi import decode, encode
from eth_abi.exceptions import DecodingError, EncodingError
from eth_utils import event_signature_to_log_topic, function_signature_to_4byte_selector

from core.exceptions import InvalidFormatException, RemoteExecutionException, UnknownMethodException


class ContractRole(str, Enum):
    SALE = "sale"
    TOKEN = "token"


SALE_ABI: list[dict[str, Any]] = [
    {
        "inputs": [],
        "name": "saleConfig",
        "outputs": [
            {"internalType": "uint256", "name": "tokenPrice", "type": "uint256"},
            {"internalType": "uint256", "name": "minPurchase", "type": "uint256"},
            {"internalType": "uint256", "name": "maxPurchase", "type": "uint256"},
            {"internalType": "uint256", "name": "maxSupply", "type": "uint256"},
            {"internalType": "uint256", "name": "startTime", "type": "uint256"},
            {"internalType": "uint256", "name": "endTime", "type": "uint256"},
            {"internalType": "bool", "name": "whitelistRequired", "type": "bool"}
        ],
        "stateMutability": "view",
        "type": "function"
    },
    {
        "inputs": [],
        "name": "totalSold",
        "outputs": [{"internalType": "uint256", "name": "", "type": "uint256"}],
        "stateMutability": "view",
        "type": "function"
    },
    {
        "inputs": [],
        "name": "totalEthRaised",
        "outputs": [{"internalType": "uint256", "name": "", "type": "uint256"}],
        "stateMutability": "view",
        "type": "function"
    },
    {
        "inputs": [],
        "name": "isSaleActive",
        "outputs": [{"internalType": "bool", "name": "", "type": "bool"}],
        "stateMutability": "view",
        "type": "function"
    },
    {
        "inputs": [{"internalType": "address", "name": "user", "type": "address"}],
        "name": "getPurchaseInfo",
        "outputs": [
            {"internalType": "uint256", "name": "amount", "type": "uint256"},
            {"internalType": "uint256", "name": "ethSpent", "type": "uint256"},
            {"internalType": "uint256", "name": "timestamp", "type": "uint256"},
            {"internalType": "bool", "name": "claimed", "type": "bool"}
        ],
        "stateMutability": "view",
        "type": "function"
    },
    {
        "inputs": [{"internalType": "address", "name": "", "type": "address"}],
        "name": "totalPurchased",
        "outputs": [{"internalType": "uint256", "name": "", "type": "uint256"}],
        "stateMutability": "view",
        "type": "function"
    },
    {
        "inputs": [],
        "name": "pause",
        "outputs": [],
        "stateMutability": "nonpayable",
        "type": "function"
    },
    {
        "inputs": [],
        "name": "unpause",
        "outputs": [],
        "stateMutability": "nonpayable",
        "type": "function"
    },
    {
        "anonymous": False,
        "inputs": [
            {"indexed": True, "internalType": "address", "name": "buyer", "type": "address"},
            {"indexed": False, "internalType": "uint256", "name": "tokenAmount", "type": "uint256"},
            {"indexed": False, "internalType": "uint256", "name": "ethAmount", "type": "uint256"},
            {"indexed": False, "internalType": "uint256", "name": "timestamp", "type": "uint256"}
        ],
        "name": "TokenPurchase",
        "type": "event"
    }
]

TOKEN_ABI: list[dict[str, Any]] = [
    {
        "inputs": [{"internalType": "address", "name": "account", "type": "address"}],
        "name": "balanceOf",
        "outputs": [{"internalType": "uint256", "name": "", "type": "uint256"}],
        "stateMutability": "view",
        "type": "function"
    },
    {
        "inputs": [{"internalType": "address", "name": "", "type": "address"}],
        "name": "whitelist",
        "outputs": [{"internalType": "bool", "name": "", "type": "bool"}],
        "stateMutability": "view",
        "type": "function"
    },
    {
        "inputs": [
            {"internalType": "address", "name": "user", "type": "address"},
            {"internalType": "bool", "name": "status", "type": "bool"}
        ],
        "name": "updateWhitelist",
        "outputs": [],
        "stateMutability": "nonpayable",
        "type": "function"
    },
    {
        "inputs": [
            {"internalType": "address[]", "name": "users", "type": "address[]"},
            {"internalType": "bool", "name": "status", "type": "bool"}
        ],
        "name": "updateWhitelistBatch",
        "outputs": [],
        "stateMutability": "nonpayable",
        "type": "function"
    }
]


@dataclass(frozen=True)
class MethodSpec:
    """
    Callable contract method.

    Attributes
    ----------
    role : ContractRole
        Contract the method lives on
    name : str
        Method name
    inputs : tuple[str, ...]
        Canonical ABI types of the arguments
    outputs : tuple[str, ...]
        Canonical ABI types of the return values
    """
    role: ContractRole
    name: str
    inputs: tuple[str, ...]
    outputs: tuple[str, ...]

    @property
    def signature(self) -> str:
        return f"{self.name}({','.join(self.inputs)})"

    @property
    def selector(self) -> bytes:
        return function_signature_to_4byte_selector(self.signature)


@dataclass(frozen=True)
class EventSpec:
    """
    Contract event with indexed/non-indexed split of its fields.
    """
    role: ContractRole
    name: str
    indexed: tuple[str, ...]
    data: tuple[str, ...]
    signature: str

    @property
    def topic(self) -> bytes:
        return event_signature_to_log_topic(self.signature)


def _parse_abi(role: ContractRole, abi: list[dict[str, Any]]) -> tuple[dict[str, MethodSpec], dict[str, EventSpec]]:
    methods = {}
    events = {}
    for item in abi:
        if item.get("type") == "function":
            methods[item["name"]] = MethodSpec(
                role=role,
                name=item["name"],
                inputs=tuple(arg["type"] for arg in item["inputs"]),
                outputs=tuple(arg["type"] for arg in item.get("outputs", []))
            )
        elif item.get("type") == "event":
            types = [arg["type"] for arg in item["inputs"]]
            events[item["name"]] = EventSpec(
                role=role,
                name=item["name"],
                indexed=tuple(arg["type"] for arg in item["inputs"] if arg.get("indexed")),
                data=tuple(arg["type"] for arg in item["inputs"] if not arg.get("indexed")),
                signature=f"{item['name']}({','.join(types)})"
            )
    return methods, events


class ContractDescriptor:
    """
    Lookup, encoding and decoding for the configured contract ABIs.

    Parameters
    ----------
    abis : dict[ContractRole, list[dict[str, Any]]] | None
        ABI per contract role; defaults to the bundled sale and token ABIs
    """

    def __init__(self, abis: dict[ContractRole, list[dict[str, Any]]] | None = None):
        abis = abis or {ContractRole.SALE: SALE_ABI, ContractRole.TOKEN: TOKEN_ABI}
        self._methods: dict[ContractRole, dict[str, MethodSpec]] = {}
        self._events: dict[ContractRole, dict[str, EventSpec]] = {}
        for role, abi in abis.items():
            self._methods[role], self._events[role] = _parse_abi(role, abi)

    def method(self, role: ContractRole, name: str) -> MethodSpec:
        """
        Get a method description.

        Raises
        ------
        UnknownMethodException
            If the role has no method with that name
        """
        try:
            return self._methods[role][name]
        except KeyError:
            raise UnknownMethodException(f"Method {name} not found in {role.value} ABI") from None

    def event(self, role: ContractRole, name: str) -> EventSpec:
        """
        Get an event description.

        Raises
        ------
        UnknownMethodException
            If the role has no event with that name
        """
        try:
            return self._events[role][name]
        except KeyError:
            raise UnknownMethodException(f"Event {name} not found in {role.value} ABI") from None

    def encode_call(self, role: ContractRole, name: str, args: tuple | list = ()) -> bytes:
        """
        Build calldata: 4-byte selector followed by ABI-encoded arguments.

        Parameters
        ----------
        role : ContractRole
            Target contract role
        name : str
            Method name
        args : tuple | list
            Positional arguments matching the method inputs

        Returns
        -------
        bytes
            Calldata

        Raises
        ------
        UnknownMethodException
            If the method is absent
        InvalidFormatException
            If the arguments do not fit the method inputs
        """
        spec = self.method(role, name)
        if len(args) != len(spec.inputs):
            raise InvalidFormatException(
                f"{spec.signature} takes {len(spec.inputs)} arguments, got {len(args)}"
            )
        try:
            return spec.selector + encode(list(spec.inputs), list(args))
        except (EncodingError, TypeError, ValueError) as e:
            raise InvalidFormatException(f"Cannot encode arguments for {spec.signature}: {e}") from e

    def decode_result(self, role: ContractRole, name: str, data: bytes) -> tuple:
        """
        Decode raw return data into a tuple shaped like the method outputs.

        Parameters
        ----------
        role : ContractRole
            Contract role
        name : str
            Method name
        data : bytes
            Raw return data from ``eth_call``

        Returns
        -------
        tuple
            One value per declared output

        Raises
        ------
        RemoteExecutionException
            If the data does not decode to the declared outputs
        """
        spec = self.method(role, name)
        if not spec.outputs:
            return ()
        if not data:
            raise RemoteExecutionException(f"Empty result for {spec.signature}; is a contract deployed there?")
        try:
            values = decode(list(spec.outputs), bytes(data))
        except (DecodingError, ValueError) as e:
            raise RemoteExecutionException(f"Cannot decode result of {spec.signature}: {e}") from e
        if len(values) != len(spec.outputs):
            raise RemoteExecutionException(
                f"{spec.signature} returned {len(values)} values, expected {len(spec.outputs)}"
            )
        return tuple(values)
