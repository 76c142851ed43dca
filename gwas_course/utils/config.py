#!/usr/bin/env python3
"""
Configuration loading for the GWAS course pipeline
Author: Dr. Vijay Singh
Email: vijay.s.gautam@gmail.com

Reads config/config.yaml and fills every section with course defaults,
so the day scripts also run from a bare checkout without a config file.
"""

import os
import sys
import copy
import logging
from datetime import datetime
from pathlib import Path

import yaml

logger = logging.getLogger('GWASCourse')

DEFAULT_CONFIG_FILE = "config/config.yaml"

DEFAULT_CONFIG = {
    'results_dir': 'results',
    'input_files': {
        'phenotypes': 'data/phenotype_data.csv',
        'genotypes': 'data/genotype_data.csv',
        'manhattan': 'data/manhattan_data.csv'
    },
    'analysis': {
        'group_column': 'Group',
        'id_column': 'Taxa',
        'traits': ['Height', 'Yield'],
        'correlation_pair': ['Height', 'Yield']
    },
    'gwas': {
        'trait': 'Height',
        'pca_total': 3,
        'method': 'linear',
        'pvalue_threshold': 0.05,
        'report_top_n': 10,
        'fdr_method': 'fdr_bh'
    },
    'plotting': {
        'enabled': True,
        'style': 'seaborn',
        'dpi': 150,
        'format': 'png',
        'palette': 'tab20',
        'significance_line': True,
        'synthesize_if_missing': True
    },
    'output': {
        'save_results': True,
        'write_summary': True
    }
}


def load_config(config_file=None):
    """Load configuration from YAML and apply defaults for every section

    An explicitly requested file must exist. When no file is given the
    default path is tried and the built-in defaults are used if it is absent.
    """
    explicit = config_file is not None
    if not explicit:
        config_file = DEFAULT_CONFIG_FILE

    if not os.path.exists(config_file):
        if explicit:
            error_msg = f"Config file not found: {config_file}"
            logger.error(error_msg)
            raise FileNotFoundError(error_msg)
        logger.info(f"⚙️ No {config_file} found, using built-in course defaults")
        return copy.deepcopy(DEFAULT_CONFIG)

    with open(config_file, 'r') as f:
        config = yaml.safe_load(f) or {}

    if not isinstance(config, dict):
        error_msg = f"Config file must contain a mapping: {config_file}"
        logger.error(error_msg)
        raise ValueError(error_msg)

    mandatory_fields = ['input_files']
    for field in mandatory_fields:
        if field not in config:
            error_msg = f"'{field}' must be specified in the config file"
            logger.error(error_msg)
            raise ValueError(error_msg)

    config.setdefault('results_dir', DEFAULT_CONFIG['results_dir'])
    for section, defaults in DEFAULT_CONFIG.items():
        if not isinstance(defaults, dict):
            continue
        # An empty YAML section such as "gwas:" loads as None
        if config.get(section) is None:
            config[section] = {}
        if not isinstance(config[section], dict):
            error_msg = f"'{section}' in {config_file} must be a mapping"
            logger.error(error_msg)
            raise ValueError(error_msg)
        for key, value in defaults.items():
            config[section].setdefault(key, copy.deepcopy(value))

    pca_total = config['gwas']['pca_total']
    if not isinstance(pca_total, int) or isinstance(pca_total, bool) or pca_total < 0:
        error_msg = f"gwas.pca_total must be a non-negative integer, got {pca_total!r}"
        logger.error(error_msg)
        raise ValueError(error_msg)

    logger.info(f"✅ Configuration loaded from: {config_file}")
    return config


def setup_logging(logs_dir, level=logging.INFO, name='gwas_course'):
    """Attach console and timestamped file handlers to the course logger"""
    logs_dir = Path(logs_dir)
    logs_dir.mkdir(parents=True, exist_ok=True)
    timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
    log_file = logs_dir / f"{name}_{timestamp}.log"

    course_logger = logging.getLogger('GWASCourse')
    for handler in course_logger.handlers[:]:
        course_logger.removeHandler(handler)
        handler.close()

    course_logger.setLevel(level)
    course_logger.propagate = False
    formatter = logging.Formatter('%(asctime)s - %(name)s - %(levelname)s - %(message)s')

    file_handler = logging.FileHandler(log_file)
    file_handler.setFormatter(formatter)
    course_logger.addHandler(file_handler)

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setFormatter(formatter)
    course_logger.addHandler(console_handler)

    course_logger.info(f"📝 Logging to: {log_file}")
    return log_file
