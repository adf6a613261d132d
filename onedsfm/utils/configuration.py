"""Configuration utilities.

Outlier rejectors are configured with hydra. Configs live in the `onedsfm.configs.outlier_rejection` config module,
and each one instantiates its `OutlierRejector` node from the `_target_` class.
"""

from typing import List, Optional

import hydra
from hydra.utils import instantiate
from omegaconf import DictConfig, OmegaConf

import onedsfm.utils.logger as logger_utils
from onedsfm.averaging.translation.outlier_rejection_1dsfm import OutlierRejection1DSfM

OUTLIER_REJECTION_CONFIG_MODULE = "onedsfm.configs.outlier_rejection"
DEFAULT_OUTLIER_REJECTION_CONFIG = "1dsfm"

logger = logger_utils.get_logger()


def _log_divider(logger) -> None:
    """Log a visual divider for better readability."""
    logger.info("🔧" + "=" * 78 + "🔧")


def compose_outlier_rejection_config(
    config_name: str = DEFAULT_OUTLIER_REJECTION_CONFIG, overrides: Optional[List[str]] = None
) -> DictConfig:
    """Composes an outlier rejection config, e.g. with overrides like "OutlierRejector.seed=3"."""
    with hydra.initialize_config_module(config_module=OUTLIER_REJECTION_CONFIG_MODULE, version_base=None):
        return hydra.compose(config_name=config_name, overrides=overrides or [])


def load_outlier_rejector(
    config_name: str = DEFAULT_OUTLIER_REJECTION_CONFIG, overrides: Optional[List[str]] = None
) -> OutlierRejection1DSfM:
    """Instantiates the outlier rejector described by a config.

    Args:
        config_name: Name of the config file in the outlier rejection config module, without extension.
        overrides: Hydra overrides applied on top of the config file.

    Returns:
        The configured outlier rejector.
    """
    cfg = compose_outlier_rejection_config(config_name, overrides)
    log_configuration_summary(cfg, logger)
    return instantiate(cfg.OutlierRejector)


def log_configuration_summary(cfg: DictConfig, logger) -> None:
    """Log a concise, user-friendly configuration summary."""
    _log_divider(logger)
    logger.info("🔧 OUTLIER REJECTION CONFIGURATION SUMMARY")
    _log_divider(logger)

    rejector_cfg = cfg.OutlierRejector
    logger.info("🧭 Outlier Rejector: %s", rejector_cfg._target_.split(".")[-1])
    for key, value in rejector_cfg.items():
        if key.startswith("_"):
            continue
        if OmegaConf.is_config(value):
            value = OmegaConf.to_yaml(value)
        logger.info("   • %s: %s", key, value)
    _log_divider(logger)
