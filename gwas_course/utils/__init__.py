"""
GWAS Course Utilities Package
Author: Dr. Vijay Singh
Email: vijay.s.gautam@gmail.com

Loading, preprocessing, association, result filtering and plotting steps
shared by the day scripts and the modular runner.
"""

import logging

# Set up logger
logger = logging.getLogger('GWASCourse')

from .exceptions import DataLoadError, ValidationError, AssociationEngineError, PlotPreconditionError
from .config import load_config, setup_logging
from .data_loader import load_table, load_phenotypes, load_genotypes, load_manhattan_data
from .preprocessing import (drop_missing, as_category, group_mean, correlation,
                            clean_phenotypes, summarize_traits, require_columns)
from .association import AssociationRunner, run_association, calculate_lambda_gc, save_results
from .results import (filter_significant, report_significant, top_hits, bonferroni_threshold,
                      summarize_results, write_summary_report)
from .plotting import GWASPlotter, manhattan_plot, qq_plot, qq_coordinates, synthesize_manhattan_data
from .directory_manager import DirectoryManager, get_directory_manager, get_module_directories

__all__ = [
    # Errors
    'DataLoadError',
    'ValidationError',
    'AssociationEngineError',
    'PlotPreconditionError',

    # Configuration
    'load_config',
    'setup_logging',

    # Data loading
    'load_table',
    'load_phenotypes',
    'load_genotypes',
    'load_manhattan_data',

    # Preprocessing
    'drop_missing',
    'as_category',
    'group_mean',
    'correlation',
    'clean_phenotypes',
    'summarize_traits',
    'require_columns',

    # Association
    'AssociationRunner',
    'run_association',
    'calculate_lambda_gc',
    'save_results',

    # Results
    'filter_significant',
    'report_significant',
    'top_hits',
    'bonferroni_threshold',
    'summarize_results',
    'write_summary_report',

    # Plotting
    'GWASPlotter',
    'manhattan_plot',
    'qq_plot',
    'qq_coordinates',
    'synthesize_manhattan_data',

    # Directories
    'DirectoryManager',
    'get_directory_manager',
    'get_module_directories'
]
