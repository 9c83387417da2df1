#!/usr/bin/env python3
"""
UPBOT Supervisor - Main Entry Point

Usage:
    upbot                          # Run against the robot on the default serial port
    upbot --port /dev/ttyUSB1      # Different port
    upbot --replay session.txt     # Offline run over recorded sensor lines
    upbot --web                    # Also serve the debug interface
"""

import argparse
import asyncio
import logging
import sys
from pathlib import Path

from upbot.config import CONTROL_LOOP_HZ, SERIAL_BAUDRATE, SERIAL_PORT, WEB_HOST, WEB_PORT
from upbot.params import POLICIES, Parameters


def main():
    """Main entry point."""
    parser = argparse.ArgumentParser(description="UPBOT Supervisor")
    parser.add_argument("--port", default=SERIAL_PORT, help="Serial port of the robot link")
    parser.add_argument("--baud", type=int, default=SERIAL_BAUDRATE, help="Serial baudrate")
    parser.add_argument(
        "--replay",
        type=Path,
        help="Read sensor lines from a file instead of the serial port",
    )
    parser.add_argument(
        "--web",
        action="store_true",
        help="Enable web interface for debugging",
    )
    parser.add_argument("--policy", choices=POLICIES, help="Command selection policy")
    parser.add_argument("--seed", type=int, help="Random seed (negative = from OS entropy)")
    parser.add_argument(
        "--log-level",
        default="INFO",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Logging level",
    )
    args = parser.parse_args()

    # Setup logging
    logging.basicConfig(
        level=getattr(logging, args.log_level),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )

    logging.getLogger("aiohttp.access").setLevel(logging.WARNING)

    logger = logging.getLogger(__name__)
    logger.info("UPBOT supervisor starting...")

    from upbot.agent import Agent
    from upbot.control import Controller
    from upbot.transport import ReplayTransport, SerialTransport

    params = Parameters.load()
    if args.policy:
        params.policy = args.policy
    if args.seed is not None:
        params.seed = args.seed

    agent = Agent(params)

    if args.replay:
        transport = ReplayTransport.from_file(args.replay)
        hz = 0  # As fast as readings come
    else:
        transport = SerialTransport(port=args.port, baudrate=args.baud)
        if not transport.connect():
            logger.error("Failed to connect to robot")
            sys.exit(1)
        hz = CONTROL_LOOP_HZ

    controller = Controller(agent, transport, hz=hz)

    async def run():
        runner = None
        if args.web:
            from upbot.web import run_server

            runner = await run_server(agent, controller, host=WEB_HOST, port=WEB_PORT)
        try:
            await controller.run()
        finally:
            if runner:
                await runner.cleanup()

    asyncio.run(run())
    logger.info(agent.describe_plan())


if __name__ == "__main__":
    main()
