"""
Main controller - Connects the agent to a robot link.

This is the main control loop that:
1. Receives a sensor string from the transport
2. Hands it to Agent.tick
3. Sends the chosen command back
"""

import asyncio
import logging
import signal
from typing import Optional

from upbot.agent import Agent
from upbot.commands import interpret_command_short
from upbot.config import CONTROL_LOOP_HZ, STATS_EVERY_TICKS
from upbot.errors import MalformedInput, TransportError
from upbot.transport import Transport

logger = logging.getLogger(__name__)


class Controller:
    """
    Runs one Agent against one Transport.

    Usage:
        controller = Controller(agent, transport)
        asyncio.run(controller.run())
    """

    def __init__(self, agent: Agent, transport: Transport, hz: int = CONTROL_LOOP_HZ):
        self.agent = agent
        self.transport = transport
        self.hz = hz

        self._running = False
        self._loop_count = 0
        self._malformed = 0
        self._last_command: Optional[int] = None

    @property
    def is_running(self) -> bool:
        return self._running

    @property
    def loop_count(self) -> int:
        return self._loop_count

    @property
    def malformed_count(self) -> int:
        return self._malformed

    async def run(self):
        """Run the control loop until stopped, finished, or the link fails."""
        logger.info("Controller starting...")

        loop = asyncio.get_running_loop()
        handled = []
        for sig in (signal.SIGINT, signal.SIGTERM):
            try:
                loop.add_signal_handler(sig, self._shutdown)
                handled.append(sig)
            except (NotImplementedError, RuntimeError):
                pass

        self._running = True
        try:
            await self._control_loop()
        finally:
            for sig in handled:
                loop.remove_signal_handler(sig)
            self._cleanup()

    def stop(self):
        self._shutdown()

    def _shutdown(self):
        """Handle shutdown signal."""
        logger.info("Shutdown requested")
        self._running = False

    def _cleanup(self):
        logger.info("Cleaning up...")
        self._running = False
        self.transport.close()
        logger.info(
            f"Controller stopped after {self._loop_count} ticks, "
            f"{self.agent.goals_found} goals, {self._malformed} malformed readings"
        )

    async def _control_loop(self):
        loop = asyncio.get_running_loop()
        period = 1.0 / self.hz if self.hz > 0 else 0.0

        while self._running:
            loop_start = loop.time()

            # 1. Next reading (blocking read off the event loop)
            try:
                line = await loop.run_in_executor(None, self.transport.receive_sensor_string)
            except TransportError as e:
                logger.error(f"Transport receive failed: {e}")
                break
            if not line:
                continue

            # 2. Decide
            try:
                cmd = self.agent.tick(line)
            except MalformedInput as e:
                self._malformed += 1
                logger.warning(f"Dropped reading: {e}")
                continue

            # 3. Execute
            try:
                self.transport.send_command(cmd)
            except TransportError as e:
                logger.error(f"Transport send failed: {e}")
                break
            self._last_command = cmd

            if self.agent.finished:
                logger.info("All goals found, stopping")
                break

            self._loop_count += 1
            if self._loop_count % STATS_EVERY_TICKS == 0:
                self._log_stats()

            elapsed = loop.time() - loop_start
            await asyncio.sleep(max(0, period - elapsed))

        self._running = False

    def _log_stats(self):
        status = self.agent.status()
        actions = "/".join(str(level["actions"]) for level in status["levels"])
        logger.info(
            f"Loop {self._loop_count}: "
            f"Goals={status['goals_found']}, "
            f"Actions={actions}, "
            f"Plan={'yes' if status['has_plan'] else 'no'}, "
            f"Last={interpret_command_short(self._last_command)}"
        )
