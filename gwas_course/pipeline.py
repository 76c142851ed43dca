#!/usr/bin/env python3
"""
Course pipeline steps shared by the day scripts and run_pipeline.py
Author: Dr. Vijay Singh
Email: vijay.s.gautam@gmail.com

Each step reads its inputs from the config, prints what a learner should look
at, and returns a dict describing what it produced. Errors are not caught
here; they propagate to the calling script and stop it.
"""

import os
import logging
from datetime import datetime

from gwas_course.utils.config import load_config, setup_logging
from gwas_course.utils.directory_manager import get_directory_manager, get_module_directories
from gwas_course.utils.data_loader import (load_phenotypes, load_genotypes, load_manhattan_data,
                                           load_table)
from gwas_course.utils.preprocessing import (clean_phenotypes, group_mean, correlation,
                                             summarize_traits)
from gwas_course.utils.association import run_association, save_results
from gwas_course.utils.results import (report_significant, top_hits, summarize_results,
                                       write_summary_report)
from gwas_course.utils.plotting import GWASPlotter, synthesize_manhattan_data

logger = logging.getLogger('GWASCourse')

RESULTS_FILE_TEMPLATE = "gwas_{trait}_results.csv"


def start_session(name, config_file=None, level=logging.INFO):
    """Load config, create the results layout and start logging for one script run"""
    config = load_config(config_file)
    dir_manager = get_directory_manager(config['results_dir'])
    setup_logging(dir_manager.get_directory('system', 'logs'), level=level, name=name)
    logger.info(f"🚀 {name} started at {datetime.now().strftime('%Y-%m-%d %H:%M:%S')}")
    logger.info(f"📁 Results directory: {config['results_dir']}")
    return config, dir_manager


def explore_phenotypes(config, dir_manager):
    """Day 1: load phenotypes, clean them, summarise groups and trait correlation"""
    analysis = config['analysis']
    group_column = analysis['group_column']
    traits = list(analysis['traits'])

    dirs = get_module_directories(
        'phenotype_exploration',
        [{'analysis_results': ['phenotype_summaries']}, {'visualization': ['phenotype_plots']}],
        dir_manager.results_dir
    )

    raw = load_phenotypes(config['input_files']['phenotypes'], analysis['id_column'],
                          group_column, traits)
    print("\n📋 First rows of the phenotype table:")
    print(raw.head().to_string(index=False))
    print(f"\nMissing values per column:\n{raw.isna().sum().to_string()}")

    cleaned = clean_phenotypes(raw, group_column, traits)

    group_means = {}
    for trait in traits:
        group_means[trait] = group_mean(cleaned, group_column, trait)
        print(f"\n📊 Mean {trait} by {group_column}:")
        for group, mean in group_means[trait].items():
            print(f"   {group}: {mean:.2f}")

    trait_a, trait_b = analysis['correlation_pair']
    r = correlation(cleaned, trait_a, trait_b)
    print(f"\n🔗 Pearson correlation between {trait_a} and {trait_b}: {r:.3f}")

    summary = summarize_traits(cleaned, group_column, traits)
    summary_file = dirs['analysis_results_phenotype_summaries'] / "trait_summary_by_group.csv"
    summary.to_csv(summary_file)
    logger.info(f"💾 Trait summary saved: {summary_file}")

    plots = []
    if config['plotting'].get('enabled', True):
        plotter = GWASPlotter(config, dir_manager.get_directory('visualization'))
        for trait in traits:
            plots.append(plotter.trait_distribution_plot(cleaned, group_column, trait))
        plots.append(plotter.trait_scatter_plot(cleaned, trait_a, trait_b, group_column))

    return {
        'n_raw': len(raw),
        'n_clean': len(cleaned),
        'group_means': group_means,
        'correlation': r,
        'summary_file': str(summary_file),
        'plots': plots,
        'status': 'completed'
    }


def visualize_manhattan_data(config, dir_manager):
    """Day 2: Manhattan and QQ plots of a plot-ready SNP table"""
    manhattan_file = config['input_files']['manhattan']
    if os.path.exists(manhattan_file) or not config['plotting'].get('synthesize_if_missing', True):
        table = load_manhattan_data(manhattan_file)
        source = manhattan_file
    else:
        logger.warning(f"⚠️ {manhattan_file} not found, synthesising demonstration data")
        table = synthesize_manhattan_data()
        source = 'synthesized'

    dirs = get_module_directories('visualization', [{'visualization': ['manhattan_plots', 'qq_plots']}],
                                  dir_manager.results_dir)
    plotter = GWASPlotter(config, dir_manager.get_directory('visualization'))
    manhattan = plotter.manhattan_plot(table, 'Position', 'P.value', 'Chromosome',
                                       name='manhattan_data')
    qq = plotter.qq_plot(table['P.value'], name='manhattan_data_qq')

    threshold = config['gwas']['pvalue_threshold']
    below = int((table['P.value'] < threshold).sum())
    print(f"\n📈 {len(table)} SNPs plotted from {source}; {below} with P.value < {threshold:g}")

    return {
        'source': source,
        'n_snps': len(table),
        'manhattan_plot': manhattan,
        'qq_plot': qq,
        'plot_dirs': {k: str(v) for k, v in dirs.items()},
        'status': 'completed'
    }


def run_gwas(config, dir_manager):
    """Day 3: association of one trait with every marker, corrected with leading PCs"""
    analysis = config['analysis']
    gwas = config['gwas']
    trait = gwas['trait']

    dirs = get_module_directories('association', [{'analysis_results': ['gwas_results']}],
                                  dir_manager.results_dir)

    phenotypes = load_phenotypes(config['input_files']['phenotypes'], analysis['id_column'],
                                 analysis['group_column'], [trait])
    genotypes = load_genotypes(config['input_files']['genotypes'])

    phenotypes = clean_phenotypes(phenotypes, analysis['group_column'], [trait])
    results = run_association(phenotypes, genotypes, gwas['pca_total'], trait, config)

    results_file = None
    if config['output'].get('save_results', True):
        results_file = save_results(
            results, dirs['analysis_results_gwas_results'] / RESULTS_FILE_TEMPLATE.format(trait=trait)
        )

    return {
        'trait': trait,
        'pca_total': gwas['pca_total'],
        'method': gwas['method'],
        'results': results,
        'result_file': results_file,
        'status': 'completed'
    }


def report_gwas(config, dir_manager, results=None):
    """Filter association results by threshold, print leading rows and plot them"""
    gwas = config['gwas']
    trait = gwas['trait']

    if results is None:
        results_file = (dir_manager.get_directory('analysis_results', 'gwas_results')
                        / RESULTS_FILE_TEMPLATE.format(trait=trait))
        results = load_table(results_file, required_columns=['SNP', 'Chromosome', 'Position', 'P.value'])

    significant = report_significant(results, gwas['pvalue_threshold'], gwas['report_top_n'])
    logger.info("🏆 Top hits:")
    hits = top_hits(results, min(5, len(results)))

    summary = summarize_results(results)
    summary_file = None
    if config['output'].get('write_summary', True):
        summary_file = write_summary_report(
            summary,
            dir_manager.get_directory('reports', 'analysis_reports') / f"gwas_{trait}_summary.txt",
            title=f"GWAS Summary Statistics - {trait} ({gwas['method']}, {gwas['pca_total']} PCs)"
        )

    plots = []
    if config['plotting'].get('enabled', True):
        plotter = GWASPlotter(config, dir_manager.get_directory('visualization'))
        plots.append(plotter.manhattan_plot(results, name=f"gwas_manhattan_{trait}"))
        plots.append(plotter.qq_plot(results['P.value'], name=f"gwas_qq_{trait}"))

    return {
        'significant': significant,
        'top_hits': hits,
        'summary': summary,
        'summary_file': summary_file,
        'plots': plots,
        'status': 'completed'
    }
