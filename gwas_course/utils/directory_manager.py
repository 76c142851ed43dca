#!/usr/bin/env python3
"""
Central Directory Management for the GWAS course pipeline
Keeps plots, result tables, reports and logs in a consistent layout

Author: Dr. Vijay Singh
Email: vijay.s.gautam@gmail.com
"""

from pathlib import Path
import logging
import os
from typing import Dict, List, Optional, Union

logger = logging.getLogger('GWASCourse')


class DirectoryManager:
    """Manages output directory creation for the day scripts"""

    DIRECTORY_STRUCTURE = {
        'analysis_results': {
            'gwas_results': 'Association results tables',
            'phenotype_summaries': 'Cleaned phenotype tables and group summaries'
        },
        'visualization': {
            'phenotype_plots': 'Trait distributions and trait correlations',
            'manhattan_plots': 'Manhattan plots',
            'qq_plots': 'Q-Q plots'
        },
        'reports': {
            'analysis_reports': 'Analysis summary reports'
        },
        'system': {
            'logs': 'Pipeline execution logs'
        }
    }

    def __init__(self, results_dir: Union[str, Path]):
        self.results_dir = Path(results_dir)
        self.created_dirs = set()

    def initialize_pipeline_directories(self) -> Dict[str, Path]:
        """Create the log directory needed before anything else runs"""
        logs_dir = self.get_directory('system', 'logs')
        logger.debug(f"📁 Pipeline directories initialized in: {self.results_dir}")
        return {'system_logs': logs_dir}

    def get_directory(self, category: str, subcategory: Optional[str] = None,
                      create: bool = True) -> Path:
        """Get directory path and optionally create it"""
        if subcategory:
            dir_path = self.results_dir / category / subcategory
        else:
            dir_path = self.results_dir / category

        if create and str(dir_path) not in self.created_dirs:
            dir_path.mkdir(parents=True, exist_ok=True)
            self.created_dirs.add(str(dir_path))
            logger.debug(f"📁 Created directory: {dir_path}")

        return dir_path

    def setup_module_directories(self, module_name: str,
                                 required_directories: List[Union[str, Dict]]) -> Dict[str, Path]:
        """Setup directories required for a specific pipeline step"""
        module_dirs = {}

        for dir_spec in required_directories:
            if isinstance(dir_spec, str):
                module_dirs[dir_spec] = self.get_directory(dir_spec)
            elif isinstance(dir_spec, dict):
                for category, subcategory in dir_spec.items():
                    subcategories = subcategory if isinstance(subcategory, list) else [subcategory]
                    for sub in subcategories:
                        key = f"{category}_{sub}" if sub else category
                        module_dirs[key] = self.get_directory(category, sub)

        logger.info(f"📁 Setup {len(module_dirs)} directories for module: {module_name}")
        return module_dirs

    def validate_directory_structure(self) -> Dict[str, bool]:
        """Report which of the known directories exist and are writable"""
        validation_results = {}

        for category, subcategories in self.DIRECTORY_STRUCTURE.items():
            for subcategory in subcategories:
                dir_path = self.results_dir / category / subcategory
                exists = dir_path.is_dir()
                validation_results[f"{category}/{subcategory}"] = exists and os.access(dir_path, os.W_OK)

        return validation_results


_global_directory_manager = None


def get_directory_manager(results_dir: Union[str, Path] = None) -> DirectoryManager:
    """Get the shared directory manager, rebuilding it for a new results directory"""
    global _global_directory_manager

    if results_dir is not None:
        if (_global_directory_manager is None
                or _global_directory_manager.results_dir != Path(results_dir)):
            _global_directory_manager = DirectoryManager(results_dir)
            _global_directory_manager.initialize_pipeline_directories()
    elif _global_directory_manager is None:
        raise ValueError("Results directory must be provided for first initialization")

    return _global_directory_manager


def get_module_directories(module_name: str,
                           required_dirs: List[Union[str, Dict]],
                           results_dir: Union[str, Path] = None) -> Dict[str, Path]:
    """Convenience function for steps to get their required directories"""
    dm = get_directory_manager(results_dir)
    return dm.setup_module_directories(module_name, required_dirs)
