import asyncio
from datetime import datetime, timezone
import random
import time

from dotenv import load_dotenv
import hydra
from loguru import logger
from omegaconf import DictConfig, OmegaConf

from patternevo.database import MemoryPatternRepository
from patternevo.events import EventBus
from patternevo.evolution.engine import (
    METRICS_EVENT,
    EvolutionConfig,
    EvolutionStrategy,
    PatternEvolutionEngine,
    PatternEvolutionMetrics,
)
from patternevo.patterns import Pattern
from patternevo.utils.logger_setup import setup_logger


def build_engine(
    cfg: DictConfig, repository: MemoryPatternRepository, events: EventBus
) -> PatternEvolutionEngine:
    rng = random.Random(cfg.random_seed) if cfg.random_seed is not None else None
    return PatternEvolutionEngine(
        repository,
        events=events,
        config=EvolutionConfig.model_validate(OmegaConf.to_container(cfg.evolution)),
        strategy=EvolutionStrategy.model_validate(OmegaConf.to_container(cfg.strategy)),
        rng=rng,
    )


def log_metrics(metrics: PatternEvolutionMetrics) -> None:
    logger.info(
        "[metrics] gen={} best={:.4f} avg={:.4f} worst={:.4f} diversity={:.4f} "
        "improvement={:+.5f}",
        metrics.generation,
        metrics.best_fitness,
        metrics.average_fitness,
        metrics.worst_fitness,
        metrics.diversity,
        metrics.improvement_rate,
    )


async def run_evolution(cfg: DictConfig) -> bool:
    start_time = time.time()

    logger.info("=" * 80)
    logger.info("Pattern Evolution Run")
    logger.info("=" * 80)
    logger.info(f"Start time: {datetime.now(timezone.utc).isoformat()}")

    try:
        logger.info("Step 1/3: Initializing components...")
        events = EventBus()
        events.subscribe(METRICS_EVENT, log_metrics)
        repository = MemoryPatternRepository(events)
        engine = build_engine(cfg, repository, events)

        seed = Pattern.model_validate(OmegaConf.to_container(cfg.seed))
        await repository.save_pattern(seed)
        logger.info(f"  Seed: {seed.name} ({seed.id})")
        logger.info(
            f"  confidence={seed.confidence:.3f}, impact={seed.impact:.3f}"
        )

        logger.info("Step 2/3: Evolving...")
        result = await engine.evolve(seed)
        await events.drain()

        logger.info("Step 3/3: Saving result...")
        if not result.success:
            logger.error(f"Evolution failed: {result.error}")
            return False

        await repository.save_pattern(result.new_pattern)
        state = engine.get_state()
        logger.info(
            f"  Best: confidence={result.metrics.confidence:.4f}, "
            f"impact={result.new_pattern.impact:.4f}"
        )
        logger.info(f"  Improving generations: {result.metrics.generation_number}")
        logger.info(f"  Iterations run: {state.iteration}")
        if state.lineage is not None:
            improvements = state.lineage.metadata.improvements
            logger.info(
                f"  Attributed improvement: efficiency={improvements.efficiency:.4f}, "
                f"reliability={improvements.reliability:.4f}, "
                f"complexity={improvements.complexity:.4f}"
            )
        if result.mutation is not None:
            logger.info(
                f"  Originating mutation: {result.mutation.type.value} "
                f"via {result.mutation.operator}"
            )
        return True

    finally:
        duration = time.time() - start_time
        logger.info(f"Total run duration: {duration:.2f} seconds")
        logger.info(f"End time: {datetime.now(timezone.utc).isoformat()}")
        logger.info("=" * 80)


@hydra.main(version_base=None, config_path="config", config_name="config")
def main(cfg: DictConfig) -> None:
    """Main entrypoint with Hydra configuration management."""
    load_dotenv()

    log_file_path = setup_logger(
        log_dir=cfg.logging.log_dir,
        level=cfg.logging.level,
        rotation=cfg.logging.rotation,
        retention=cfg.logging.retention,
        run_name=cfg.seed.name,
    )
    logger.info(
        "Working directory: {}.",
        hydra.core.hydra_config.HydraConfig.get().runtime.output_dir,
    )
    logger.info(f"Log file: {log_file_path}")
    if not asyncio.run(run_evolution(cfg)):
        raise SystemExit(1)


if __name__ == "__main__":
    main()
