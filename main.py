"""
Main file for the project. Optimizes a furniture layout and plays it back.
"""

import logging
import os
import time

from datetime import timedelta
from pathlib import Path

import hydra

from omegaconf import DictConfig, OmegaConf

from layoutsmith.layout.room import LayoutState
from layoutsmith.optimizer import (
    AnnealingConfig,
    AnnealingRun,
    CostModel,
    CostWeights,
    PlaybackBuffer,
    PlaybackTimer,
)
from layoutsmith.utils.logging import ConsoleLogger, FileLoggingContext

console_logger = logging.getLogger(__name__)


def run_local(cfg: DictConfig):
    start_time = time.time()
    OmegaConf.resolve(cfg)

    hydra_cfg = hydra.core.hydra_config.HydraConfig.get()
    output_dir = Path(hydra_cfg.runtime.output_dir)
    logger = ConsoleLogger(output_dir=output_dir)

    with FileLoggingContext(
        log_file_path=output_dir / "optimize.log",
        level=logging.getLogger().getEffectiveLevel(),
    ):
        console_logger.info(f"Outputs will be saved to: {output_dir}")
        console_logger.info("Resolved configuration:\n" + OmegaConf.to_yaml(cfg))

        annealing_config = AnnealingConfig.from_config(cfg.annealing)
        cost_model = CostModel(CostWeights.from_config(cfg.cost_weights))
        initial_state = LayoutState.from_dict(
            OmegaConf.to_container(cfg.layout, resolve=True)
        )
        logger.log_hyperparams(
            {
                "initial_temperature": annealing_config.initial_temperature,
                "cooling_decay": annealing_config.cooling_decay,
                "num_swaps": annealing_config.num_swaps,
                "record_policy": annealing_config.record_policy.value,
                "seed": annealing_config.seed,
                "weights": vars(cost_model.weights),
            }
        )
        logger.log_layout(initial_state, name="input")

        buffer = PlaybackBuffer()
        run = AnnealingRun(
            initial_state, annealing_config, cost_model=cost_model, buffer=buffer
        )
        with PlaybackTimer(
            buffer, sink=logger.log_layout, interval=cfg.playback.interval
        ) as timer:
            result = run.run()
            logger.log(
                {
                    "initial_energy": result.initial_energy,
                    "best_energy": result.best_energy,
                    "iterations": result.iterations,
                    "accepted_moves": result.accepted_moves,
                }
            )
            if not timer.wait_until_drained(timeout=cfg.playback.timeout):
                console_logger.warning(
                    f"Playback timed out with {len(buffer)} states undelivered"
                )

        console_logger.info(
            "Optimization completed in "
            f"{timedelta(seconds=time.time() - start_time)}"
        )


@hydra.main(version_base=None, config_path="configurations", config_name="config")
def run(cfg: DictConfig):
    # Configure logging level from LOGLEVEL environment variable.
    log_level = os.environ.get("LOGLEVEL", "INFO").upper()
    logging.basicConfig(
        level=getattr(logging, log_level, logging.INFO),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )

    run_local(cfg)


if __name__ == "__main__":
    run()
