__title__ = "dualwan_agent"
__description__ = (
    "Policy routing agent for a dual-WAN Linux gateway: LAN traffic egresses the primary"
    " WAN, individual hosts can be moved to the secondary WAN over a local HTTP API."
)
__version__ = "1.0.0"
__status__ = "beta"
__license__ = "BSD-3-Clause"
__license_url__ = "https://opensource.org/licenses/BSD-3-Clause"
