#!/usr/bin/env python3
"""
Modular GWAS Course Pipeline Runner
Runs the day-by-day course steps separately, in combination, or all together
with dependency checking and helpful messages.

Author: Dr. Vijay Singh
Email: vijay.s.gautam@gmail.com
"""

import argparse
import sys
import os
import logging
import traceback
from datetime import datetime
from pathlib import Path

import psutil

from gwas_course.pipeline import (start_session, explore_phenotypes, visualize_manhattan_data,
                                  run_gwas, report_gwas, RESULTS_FILE_TEMPLATE)

EXECUTION_ORDER = [
    'phenotype_exploration',
    'result_visualization',
    'association',
    'reporting'
]


class ModularGWASPipeline:
    def __init__(self, config_path=None, log_level=logging.INFO):
        self.config_path = config_path
        self.config, self.directory_manager = start_session('gwas_pipeline', config_path, log_level)
        self.results_dir = Path(self.config['results_dir'])
        self.logger = logging.getLogger('GWASCourse')

        trait = self.config['gwas']['trait']
        self.modules = {
            'phenotype_exploration': {
                'function': self.run_phenotype_exploration,
                'dependencies': [],
                'description': 'Clean phenotypes, group means, trait correlation and plots (day 1)',
                'output_files': [self.results_dir / 'analysis_results' / 'phenotype_summaries' /
                                 'trait_summary_by_group.csv']
            },
            'result_visualization': {
                'function': self.run_result_visualization,
                'dependencies': [],
                'description': 'Manhattan and QQ plots of a plot-ready SNP table (day 2)',
                'output_files': [self.results_dir / 'visualization' / 'manhattan_plots' /
                                 'manhattan_data.png']
            },
            'association': {
                'function': self.run_association,
                'dependencies': ['phenotype_exploration'],
                'description': 'PCA-corrected single-marker association (day 3)',
                'output_files': [self.results_dir / 'analysis_results' / 'gwas_results' /
                                 RESULTS_FILE_TEMPLATE.format(trait=trait)]
            },
            'reporting': {
                'function': self.run_reporting,
                'dependencies': ['association'],
                'description': 'Significant markers, summary report and result plots (day 3)',
                'output_files': [self.results_dir / 'reports' / 'analysis_reports' /
                                 f'gwas_{trait}_summary.txt']
            }
        }

        # Track which modules have been run in this session
        self.completed_modules = set()
        self.execution_times = {}
        self.association_results = None

    def monitor_system_resources(self):
        """Log memory and disk usage"""
        memory = psutil.virtual_memory()
        disk = psutil.disk_usage(str(self.results_dir.resolve().anchor))

        self.logger.info("💻 System Resources:")
        self.logger.info(f"   Memory: {memory.percent:.1f}% used ({memory.available / (1024**3):.1f} GB available)")
        self.logger.info(f"   Disk: {disk.percent:.1f}% used ({disk.free / (1024**3):.1f} GB free)")

        if memory.percent > 90:
            self.logger.warning("⚠️  High memory usage detected!")
        if disk.percent > 90:
            self.logger.warning("⚠️  Low disk space detected!")

    def check_dependencies(self, module_name):
        """Check if all dependencies for a module are satisfied"""
        dependencies = self.modules[module_name]['dependencies']
        missing_deps = [dep for dep in dependencies if dep not in self.completed_modules]

        if missing_deps:
            self.logger.error(f"❌ Module '{module_name}' requires the following modules to be run first:")
            for dep in missing_deps:
                self.logger.error(f"   📍 {dep}: {self.modules[dep]['description']}")
                if self.check_module_outputs(dep):
                    self.logger.info(f"   💡 Output files found for '{dep}'. You can skip dependency with --force")

            self.logger.info("💡 Suggested command to run dependencies:")
            self.logger.info(f"   python run_pipeline.py --modules {' '.join(missing_deps)} {module_name}")
            self.logger.info("💡 Or run all required dependencies automatically:")
            self.logger.info(f"   python run_pipeline.py --modules {module_name} --auto-deps")
            return False
        return True

    def check_module_outputs(self, module_name):
        """Check if a module's output files already exist"""
        existing_files = [f for f in self.modules[module_name].get('output_files', []) if Path(f).exists()]

        if existing_files:
            self.logger.info(f"   📁 Found existing output files for '{module_name}':")
            for file_path in existing_files:
                self.logger.info(f"      - {file_path}")
            return True
        return False

    def mark_module_completed(self, module_name, execution_time):
        """Mark a module as completed and record execution time"""
        self.completed_modules.add(module_name)
        self.execution_times[module_name] = execution_time
        self.logger.info(f"✅ {module_name} completed successfully in {execution_time:.2f} seconds")

    def _run_step(self, module_name, title, step):
        start_time = datetime.now()
        self.logger.info("\n" + "=" * 60)
        self.logger.info(f"🚀 RUNNING {title} MODULE")
        self.logger.info("=" * 60)

        try:
            outcome = step()
        except Exception as e:
            self.logger.error(f"❌ {title.capitalize()} failed: {e}")
            self.logger.debug(traceback.format_exc())
            return False

        if outcome.get('status') != 'completed':
            self.logger.error(f"❌ {title.capitalize()} did not complete")
            return False

        self.mark_module_completed(module_name, (datetime.now() - start_time).total_seconds())
        return True

    def run_phenotype_exploration(self):
        """Run phenotype exploration module"""
        return self._run_step('phenotype_exploration', 'PHENOTYPE EXPLORATION',
                              lambda: explore_phenotypes(self.config, self.directory_manager))

    def run_result_visualization(self):
        """Run result visualization module"""
        return self._run_step('result_visualization', 'RESULT VISUALIZATION',
                              lambda: visualize_manhattan_data(self.config, self.directory_manager))

    def run_association(self):
        """Run association module and keep its results for reporting"""
        def step():
            outcome = run_gwas(self.config, self.directory_manager)
            self.association_results = outcome['results']
            return outcome

        return self._run_step('association', 'ASSOCIATION', step)

    def run_reporting(self):
        """Run reporting module; reads saved results when association ran in an earlier session"""
        if self.association_results is None:
            self.logger.info("📂 No association results in this session, reading saved results")
        return self._run_step('reporting', 'REPORTING',
                              lambda: report_gwas(self.config, self.directory_manager,
                                                  self.association_results))

    def run_modules(self, module_list, force=False, auto_deps=False):
        """Run specified modules in dependency order"""
        modules_to_run = [mod for mod in EXECUTION_ORDER if mod in module_list]
        self.logger.info(f"🎯 Target modules: {', '.join(modules_to_run)}")

        if auto_deps:
            all_required = self.get_all_dependencies(modules_to_run)
            modules_to_run = [mod for mod in EXECUTION_ORDER if mod in all_required]
            self.logger.info(f"🔧 Auto-added dependencies: {', '.join(modules_to_run)}")

        success_count = 0
        total_modules = len(modules_to_run)

        for i, module_name in enumerate(modules_to_run, 1):
            self.logger.info(f"\n📦 Progress: [{i}/{total_modules}] - {module_name}")

            if not force and not self.check_dependencies(module_name):
                self.logger.error(f"❌ Skipping {module_name} due to missing dependencies")
                return False

            if self.modules[module_name]['function']():
                success_count += 1
            else:
                self.logger.error(f"❌ {module_name} failed!")
                return False

        self.logger.info(f"\n🎉 Pipeline execution summary: {success_count}/{total_modules} modules completed successfully")
        return success_count == total_modules

    def get_all_dependencies(self, target_modules):
        """All dependencies for target modules, including transitive ones"""
        all_required = set(target_modules)
        for module in target_modules:
            for dep in self.modules[module]['dependencies']:
                all_required.add(dep)
                all_required.update(self.get_all_dependencies([dep]))
        return all_required

    def list_modules(self):
        """List all available modules with descriptions"""
        self.logger.info("\n" + "=" * 80)
        self.logger.info("🔧 GWAS COURSE PIPELINE - AVAILABLE MODULES")
        self.logger.info("=" * 80)

        for i, module_name in enumerate(EXECUTION_ORDER, 1):
            module_info = self.modules[module_name]
            deps = ", ".join(module_info['dependencies']) if module_info['dependencies'] else "None"
            self.logger.info(f"{i:2d}. {module_name:25} - {module_info['description']}")
            self.logger.info(f"     📍 Dependencies: {deps}")
            self.logger.info(f"     📁 Outputs: {', '.join(os.path.basename(str(f)) for f in module_info['output_files'])}")

        self.logger.info(f"\n📊 Total modules available: {len(self.modules)}")
        self.logger.info("\n💡 USAGE EXAMPLES:")
        self.logger.info("  Run all modules: python run_pipeline.py --all")
        self.logger.info("  Run specific:    python run_pipeline.py --modules phenotype_exploration association")
        self.logger.info("  With auto-deps:  python run_pipeline.py --modules reporting --auto-deps")
        self.logger.info("  Force run:       python run_pipeline.py --modules reporting --force")

    def print_execution_summary(self):
        """Print summary of module execution times"""
        if self.execution_times:
            self.logger.info("\n" + "=" * 60)
            self.logger.info("⏱️  EXECUTION TIME SUMMARY")
            self.logger.info("=" * 60)

            total_time = sum(self.execution_times.values())
            for module, time_taken in self.execution_times.items():
                self.logger.info(f"  {module:25} - {time_taken:8.2f}s")
            self.logger.info(f"  {'Total':25} - {total_time:8.2f}s")


def main():
    parser = argparse.ArgumentParser(
        description='Modular GWAS Course Pipeline',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog='''
USAGE:
  Run all modules:
    python run_pipeline.py --all

  Run specific modules:
    python run_pipeline.py --modules phenotype_exploration result_visualization

  Report on results saved by an earlier run:
    python run_pipeline.py --modules reporting --force

  List available modules:
    python run_pipeline.py --list

  Custom configuration and log level:
    python run_pipeline.py --config config/test_config.yaml --all --log-level DEBUG
        '''
    )

    parser.add_argument('--config', default=None,
                        help='Path to configuration file (default: config/config.yaml if present)')
    parser.add_argument('--modules', nargs='+', choices=EXECUTION_ORDER,
                        help='Run specific modules')
    parser.add_argument('--all', action='store_true',
                        help='Run all modules in pipeline')
    parser.add_argument('--list', action='store_true',
                        help='List all available modules with descriptions')
    parser.add_argument('--force', action='store_true',
                        help='Run even if dependencies have not run in this session')
    parser.add_argument('--auto-deps', action='store_true',
                        help='Automatically add all dependencies of the requested modules')
    parser.add_argument('--log-level', choices=['DEBUG', 'INFO', 'WARNING', 'ERROR'],
                        default='INFO', help='Set logging level')

    args = parser.parse_args()

    pipeline = ModularGWASPipeline(args.config, getattr(logging, args.log_level))

    if args.list:
        pipeline.list_modules()
        return

    if not args.all and not args.modules:
        pipeline.logger.error("❌ Please specify either --all, --modules, or --list")
        parser.print_help()
        sys.exit(1)

    start_time = datetime.now()
    pipeline.monitor_system_resources()

    try:
        modules = EXECUTION_ORDER if args.all else args.modules
        success = pipeline.run_modules(modules, args.force, args.auto_deps)

        pipeline.print_execution_summary()
        total_time = (datetime.now() - start_time).total_seconds()
        pipeline.logger.info(f"\n⏱️  Total pipeline time: {total_time:.2f}s")

        if success:
            pipeline.logger.info("🎉 Modular pipeline completed successfully!")
        else:
            pipeline.logger.error("❌ Modular pipeline completed with errors")
            pipeline.logger.info("💡 Check the logs for detailed error information")
            sys.exit(1)

    except KeyboardInterrupt:
        pipeline.logger.info("\n⚠️  Pipeline interrupted by user")
        sys.exit(1)


if __name__ == "__main__":
    main()
