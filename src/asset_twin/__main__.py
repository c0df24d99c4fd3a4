"""Allow `python -m asset_twin`."""

from asset_twin.run import main

main()
