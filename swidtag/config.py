"""
Configuration management for the swidtag package.
"""

import logging
import os
import yaml
from dataclasses import dataclass, field
from typing import Dict, Optional

from .exceptions import ConfigurationError
from .logging_config import get_logger, setup_logging

logger = get_logger('config')


@dataclass
class OutputConfig:
    """Configuration for rendering tags to text."""
    indent: str = "  "
    xml_declaration: bool = True


@dataclass
class ParsingConfig:
    """Configuration for reading tags from text."""
    require_namespace: bool = True


@dataclass
class LoggingConfig:
    """Configuration for logging."""
    level: str = "INFO"
    log_file: Optional[str] = None
    verbose: bool = False


@dataclass
class Config:
    """Main configuration class."""
    output: OutputConfig = field(default_factory=OutputConfig)
    parsing: ParsingConfig = field(default_factory=ParsingConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)


def load_config(config_path: Optional[str] = None) -> Config:
    """
    Load configuration from file or use defaults.
    
    Args:
        config_path: Optional path to a YAML configuration file
        
    Returns:
        Config object with loaded settings
        
    Raises:
        ConfigurationError: If configuration file is invalid
    """
    config = Config()
    
    if config_path and os.path.exists(config_path):
        try:
            with open(config_path, 'r', encoding='utf-8') as f:
                config_data = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise ConfigurationError(f"Invalid YAML in configuration file: {e}")
        except OSError as e:
            raise ConfigurationError(f"Error loading configuration file: {e}")
        
        if config_data:
            if not isinstance(config_data, dict):
                raise ConfigurationError("Configuration file must contain a mapping")
            _update_config_from_dict(config, config_data)
            logger.info(f"Loaded configuration from {config_path}")
    
    elif config_path:
        logger.warning(f"Configuration file not found: {config_path}")
    
    return config


def _update_config_from_dict(config: Config, config_data: Dict) -> None:
    """
    Update configuration object from dictionary data.
    
    Args:
        config: Config object to update
        config_data: Dictionary with configuration data
    """
    if 'output' in config_data:
        output_data = _section(config_data, 'output')
        if 'indent' in output_data:
            indent = output_data['indent']
            # Allow "indent: 4" as shorthand for four spaces
            config.output.indent = " " * indent if isinstance(indent, int) else str(indent)
        if 'xml_declaration' in output_data:
            config.output.xml_declaration = bool(output_data['xml_declaration'])
    
    if 'parsing' in config_data:
        parsing_data = _section(config_data, 'parsing')
        if 'require_namespace' in parsing_data:
            config.parsing.require_namespace = bool(parsing_data['require_namespace'])
    
    if 'logging' in config_data:
        logging_data = _section(config_data, 'logging')
        if 'level' in logging_data:
            config.logging.level = logging_data['level']
        if 'log_file' in logging_data:
            config.logging.log_file = logging_data['log_file']
        if 'verbose' in logging_data:
            config.logging.verbose = bool(logging_data['verbose'])


def _section(config_data: Dict, name: str) -> Dict:
    section = config_data[name] or {}
    if not isinstance(section, dict):
        raise ConfigurationError(f"Configuration section '{name}' must be a mapping")
    return section


def configure_logging(config: Config) -> logging.Logger:
    """
    Apply the logging section of a loaded configuration.
    
    Args:
        config: Config object, usually from load_config
        
    Returns:
        The configured package logger
    """
    return setup_logging(
        level=config.logging.level,
        log_file=config.logging.log_file,
        verbose=config.logging.verbose,
    )
