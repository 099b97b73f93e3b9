"""stable-keeper: run the liquidation monitor against a deployed vault"""
import argparse
import logging
import sys

from .config import load_config, load_private_key, resolve_rpc_url
from .clients import web3_backend_factory
from .errors import ConfigError
from .monitor import LiquidationMonitor
from .scheduler import create_scheduler

logger = logging.getLogger(__name__)

def parse_args(argv=None):
    parser = argparse.ArgumentParser(description="Liquidation keeper for MiniStableVault")
    parser.add_argument("--config", required=True, help="path to the keeper JSON config")
    parser.add_argument("--env-file", default=None, help="dotenv file holding KEEPER_PRIVATE_KEY")
    parser.add_argument("--once", action="store_true", help="run a single tick and exit")
    parser.add_argument("--mainnet", action="store_true", help="resolve chain selectors as mainnets")
    parser.add_argument("--log-level", default="INFO")
    return parser.parse_args(argv)

def main(argv=None) -> int:
    args = parse_args(argv)
    logging.basicConfig(
        level=getattr(logging, args.log_level.upper(), logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    try:
        config = load_config(args.config)
        private_key = load_private_key(args.env_file)
    except ConfigError as e:
        logger.error(str(e))
        return 2

    factory = web3_backend_factory(resolve_rpc_url(config), private_key)
    monitor = LiquidationMonitor(config, factory, is_testnet=not args.mainnet)

    if args.once:
        monitor.on_tick()
        return 0

    scheduler = create_scheduler(monitor, config.schedule)
    try:
        scheduler.start()
    except (KeyboardInterrupt, SystemExit):
        logger.info("Keeper stopped")
    return 0

if __name__ == "__main__":
    sys.exit(main())
