#!/usr/bin/env python3
"""
GWAS Course - Environment Validation Script
Checks the Python version, required packages, write access, project layout
and example data before the first day of the course.

Author: Dr. Vijay Singh
Email: vijay.s.gautam@gmail.com
"""

import os
import re
import sys
import shutil
import platform
import importlib
import logging
from pathlib import Path

import psutil

# Distribution name -> (import name, minimum version)
REQUIRED_PACKAGES = {
    'pandas': ('pandas', '1.3.0'),
    'numpy': ('numpy', '1.21.0'),
    'scipy': ('scipy', '1.7.0'),
    'matplotlib': ('matplotlib', '3.5.0'),
    'seaborn': ('seaborn', '0.11.0'),
    'PyYAML': ('yaml', '6.0'),
    'scikit-learn': ('sklearn', '1.0.0'),
    'statsmodels': ('statsmodels', '0.13.0'),
    'psutil': ('psutil', '5.8.0')
}

REQUIRED_DIRS = ['config', 'data', 'gwas_course', 'gwas_course/utils']

REQUIRED_FILES = [
    'day1_explore_phenotypes.py',
    'day2_visualize_results.py',
    'day3_run_gwas.py',
    'run_pipeline.py',
    'config/config.yaml',
    'gwas_course/pipeline.py',
    'gwas_course/utils/data_loader.py',
    'gwas_course/utils/preprocessing.py',
    'gwas_course/utils/association.py',
    'gwas_course/utils/results.py',
    'gwas_course/utils/plotting.py'
]

EXPECTED_DATA_FILES = [
    'data/phenotype_data.csv',
    'data/genotype_data.csv',
    'data/manhattan_data.csv'
]


def setup_logging():
    """Setup logging for validation script"""
    logging.basicConfig(
        level=logging.INFO,
        format='%(message)s',
        handlers=[logging.StreamHandler(sys.stdout)]
    )


def version_tuple(version):
    """Leading numeric components of a version string, e.g. '1.26.4rc1' -> (1, 26, 4)"""
    parts = []
    for piece in version.split('.')[:3]:
        match = re.match(r'\d+', piece)
        if not match:
            break
        parts.append(int(match.group()))
    return tuple(parts)


class EnvironmentValidator:
    def __init__(self):
        self.system_info = {}
        self.validation_results = {
            'system': {'status': 'unknown', 'issues': [], 'suggestions': []},
            'python_packages': {'status': 'unknown', 'issues': [], 'suggestions': []},
            'file_permissions': {'status': 'unknown', 'issues': [], 'suggestions': []},
            'project_structure': {'status': 'unknown', 'issues': [], 'suggestions': []},
            'overall': {'status': 'unknown'}
        }

    def _record(self, category, issues, suggestions):
        self.validation_results[category]['issues'] = issues
        self.validation_results[category]['suggestions'] = suggestions
        self.validation_results[category]['status'] = 'pass' if not issues else 'fail'

    def collect_system_info(self):
        """Collect system information"""
        logging.info("🖥️  Collecting system information...")

        memory = psutil.virtual_memory()
        self.system_info = {
            'platform': platform.system(),
            'platform_release': platform.release(),
            'python_version': platform.python_version(),
            'total_memory_gb': round(memory.total / (1024**3), 1),
            'available_memory_gb': round(memory.available / (1024**3), 1),
            'disk_usage': psutil.disk_usage(str(Path.cwd().anchor))
        }

        logging.info(f"   • System: {self.system_info['platform']} {self.system_info['platform_release']}")
        logging.info(f"   • Python: {self.system_info['python_version']}")
        logging.info(f"   • Memory: {self.system_info['total_memory_gb']} GB total, "
                     f"{self.system_info['available_memory_gb']} GB available")
        logging.info(f"   • Disk: {self.system_info['disk_usage'].free // (1024**3)} GB free")

    def validate_system_requirements(self):
        """Validate Python version and free disk space"""
        logging.info("\n🔍 Validating system requirements...")
        issues = []
        suggestions = []

        if sys.version_info < (3, 8):
            issues.append(f"Python version {self.system_info['python_version']} is below minimum required 3.8")
            suggestions.append("Upgrade to Python 3.8 or higher")
        else:
            logging.info("   ✅ Python version: OK")

        # The course data is tiny; 1 GB covers plots and logs with room to spare
        free_disk_gb = self.system_info['disk_usage'].free // (1024**3)
        if free_disk_gb < 1:
            issues.append(f"Low disk space ({free_disk_gb} GB free)")
            suggestions.append("Free up disk space before running the course scripts")
        else:
            logging.info(f"   ✅ Disk space: {free_disk_gb} GB free")

        self._record('system', issues, suggestions)

    def validate_python_packages(self):
        """Validate all required Python packages"""
        logging.info("\n🐍 Validating Python packages...")
        issues = []
        suggestions = []

        for package, (import_name, min_version) in REQUIRED_PACKAGES.items():
            try:
                module = importlib.import_module(import_name)
            except ImportError:
                issues.append(f"Required package not found: {package}")
                suggestions.append(f"Install {package}: pip install '{package}>={min_version}'")
                continue

            actual_version = getattr(module, '__version__', 'unknown')
            if actual_version == 'unknown':
                logging.info(f"   ✅ {package}: installed (version unknown)")
            elif version_tuple(actual_version) < version_tuple(min_version):
                issues.append(f"{package} version {actual_version} is below required {min_version}")
                suggestions.append(f"Upgrade {package}: pip install --upgrade {package}")
            else:
                logging.info(f"   ✅ {package}: {actual_version} (>= {min_version})")

        self._record('python_packages', issues, suggestions)

    def validate_file_permissions(self):
        """Validate that results can be written below the working directory"""
        logging.info("\n📁 Validating file permissions...")
        issues = []
        suggestions = []

        results_dir = Path.cwd() / 'validation_test_results'
        try:
            results_dir.mkdir(exist_ok=True)
            (results_dir / 'test.txt').write_text('test')
            logging.info("   ✅ Directory creation: OK")
        except OSError as e:
            issues.append(f"Cannot create directories or write files: {e}")
            suggestions.append("Run from a directory with write permissions")
        finally:
            shutil.rmtree(results_dir, ignore_errors=True)

        self._record('file_permissions', issues, suggestions)

    def validate_project_structure(self):
        """Validate course project layout and example data"""
        logging.info("\n📋 Validating project structure...")
        issues = []
        suggestions = []

        for directory in REQUIRED_DIRS:
            if not os.path.isdir(directory):
                issues.append(f"Missing directory: {directory}")
                suggestions.append(f"Run from the project root or create {directory}/")
            else:
                logging.info(f"   ✅ {directory}/: found")

        for file in REQUIRED_FILES:
            if not os.path.exists(file):
                issues.append(f"Missing file: {file}")
                suggestions.append(f"Ensure {file} exists in the project")
            else:
                logging.info(f"   ✅ {file}: found")

        # Missing data only warns; create_sample_data.py can regenerate it
        missing_data = [f for f in EXPECTED_DATA_FILES if not os.path.exists(f)]
        for data_file in EXPECTED_DATA_FILES:
            if data_file not in missing_data:
                logging.info(f"   ✅ {data_file}: found")
        if missing_data:
            logging.info(f"   ⚠️  Expected data files not found: {', '.join(missing_data)}")
            suggestions.append("Run create_sample_data.py to generate the example data")

        self._record('project_structure', issues, suggestions)
        return len(issues) == 0

    def run_comprehensive_validation(self):
        """Run all validation checks"""
        logging.info("=" * 70)
        logging.info("🔬 GWAS COURSE - ENVIRONMENT VALIDATION")
        logging.info("=" * 70)

        self.collect_system_info()
        self.validate_system_requirements()
        self.validate_python_packages()
        self.validate_file_permissions()
        self.validate_project_structure()

        statuses = [results['status'] for category, results in self.validation_results.items()
                    if category != 'overall']
        self.validation_results['overall']['status'] = (
            'pass' if all(status == 'pass' for status in statuses) else 'fail'
        )

    def generate_report(self):
        """Log the validation summary and return True when everything passed"""
        logging.info("\n" + "=" * 70)
        logging.info("📊 VALIDATION REPORT SUMMARY")
        logging.info("=" * 70)

        passed = self.validation_results['overall']['status'] == 'pass'
        if passed:
            logging.info("🎉 ENVIRONMENT VALIDATION: PASSED ✅")
        else:
            logging.info("❌ ENVIRONMENT VALIDATION: FAILED")
            logging.info("   Please address the issues below before starting the course.")

        found_issues = False
        for category, results in self.validation_results.items():
            if category == 'overall' or not results['issues']:
                continue
            found_issues = True
            logging.info(f"\n📋 {category.upper().replace('_', ' ')} ISSUES:")
            for issue in results['issues']:
                logging.info(f"   • {issue}")
            if results['suggestions']:
                logging.info("   💡 SUGGESTIONS:")
                for suggestion in results['suggestions']:
                    logging.info(f"     - {suggestion}")

        if not found_issues:
            logging.info("\n✅ No critical issues found!")

        logging.info("\n🎯 NEXT STEPS:")
        if passed:
            logging.info("   1. Review configuration: config/config.yaml")
            logging.info("   2. Day 1: python day1_explore_phenotypes.py")
            logging.info("   3. Day 2: python day2_visualize_results.py")
            logging.info("   4. Day 3: python day3_run_gwas.py")
        else:
            logging.info("   1. Address all critical issues listed above")
            logging.info("   2. Re-run validation: python validate_environment.py")

        logging.info("\n" + "=" * 70)
        return passed


def main():
    """Main validation function"""
    validator = EnvironmentValidator()
    validator.run_comprehensive_validation()
    success = validator.generate_report()
    sys.exit(0 if success else 1)


if __name__ == "__main__":
    setup_logging()
    main()
