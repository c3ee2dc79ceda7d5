"""Chain id to Gyro deployment resolution.

The node's chain id selects a deployment network; unknown chains fail
loudly instead of falling back to some default deployment.
"""

import logging
from dataclasses import dataclass
from typing import Optional

from gyrosdk.constants import FUND_CONTRACT, LIB_CONTRACT, NETWORKS
from gyrosdk.errors import DeploymentNotFoundError, UnsupportedNetworkError
from gyrosdk.types import Address

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Deployment:
    """Addresses of the Gyro contracts on one network."""

    network: str
    chain_id: int
    fund_address: Address
    lib_address: Address


def network_name(chain_id: int) -> str:
    """Deployment network name for a chain id.

    Raises:
        UnsupportedNetworkError: If the chain id is not a known Gyro network
    """
    name = NETWORKS.get(chain_id)
    if name is None:
        raise UnsupportedNetworkError(chain_id)
    return name


def resolve_deployment(
    chain_id: int,
    deployments: dict[str, dict[str, str]],
) -> Deployment:
    """Resolve the contract addresses for a chain id.

    Args:
        chain_id: Chain id reported by the node
        deployments: Network name -> contract name -> address

    Raises:
        UnsupportedNetworkError: Unknown chain id
        DeploymentNotFoundError: Known network without configured addresses
    """
    network = network_name(chain_id)
    addresses = deployments.get(network)
    if not addresses:
        raise DeploymentNotFoundError(network)

    fund_address = _require(addresses, network, FUND_CONTRACT)
    lib_address = _require(addresses, network, LIB_CONTRACT)

    logger.debug(
        "Resolved %s deployment (chain %d): fund=%s lib=%s",
        network, chain_id, fund_address, lib_address,
    )
    return Deployment(
        network=network,
        chain_id=chain_id,
        fund_address=fund_address,
        lib_address=lib_address,
    )


def _require(addresses: dict[str, str], network: str, contract: str) -> Address:
    address: Optional[str] = addresses.get(contract)
    if not address:
        raise DeploymentNotFoundError(network, contract)
    return address


async def get_deployment(web3, deployments: dict[str, dict[str, str]]) -> Deployment:
    """Query the node's chain id and resolve its deployment."""
    chain_id = await web3.eth.chain_id
    return resolve_deployment(chain_id, deployments)
