#!/usr/bin/env python3
"""
Plotting utilities for phenotype exploration and GWAS results
Author: Dr. Vijay Singh
Email: vijay.s.gautam@gmail.com

- Manhattan plot: position vs. -log10(p), coloured by chromosome
- QQ plot: observed vs. uniform-expected -log10(p) with confidence band
- Trait box plots and trait-vs-trait scatter plots for the phenotype day

P-values are checked before any log transform; a missing, zero, negative or
>1 value raises PlotPreconditionError instead of plotting an infinity.
"""

import logging
from pathlib import Path
from typing import Any, Dict, Optional

import numpy as np
import pandas as pd
import matplotlib
matplotlib.use('Agg')  # Non-interactive backend, figures go to files
import matplotlib.pyplot as plt
import seaborn as sns
from scipy import stats

from gwas_course.utils.association import calculate_lambda_gc
from gwas_course.utils.exceptions import PlotPreconditionError, ValidationError
from gwas_course.utils.preprocessing import correlation, require_columns

logger = logging.getLogger('GWASCourse')


def check_pvalues(p_values, context: str = "plot") -> np.ndarray:
    """Return p-values as floats, raising if any cannot be log-transformed"""
    p_values = np.asarray(p_values, dtype=float)
    if p_values.size == 0:
        raise PlotPreconditionError(f"{context}: no p-values supplied")

    invalid = ~np.isfinite(p_values) | (p_values <= 0) | (p_values > 1)
    if invalid.any():
        examples = p_values[invalid][:5].tolist()
        logger.error(f"❌ {context}: {int(invalid.sum())} p-values outside (0, 1]: {examples}")
        raise PlotPreconditionError(
            f"{context}: {int(invalid.sum())} p-values outside (0, 1] cannot be "
            f"log-transformed, e.g. {examples}"
        )
    return p_values


def qq_coordinates(p_values):
    """Expected and observed -log10(p), both descending, for a QQ plot

    Expected quantiles of uniform(0, 1) are i/n for i = 1..n.
    """
    p_values = check_pvalues(p_values, "qq_coordinates")
    n = len(p_values)
    observed = -np.log10(np.sort(p_values))
    expected = -np.log10(np.arange(1, n + 1) / n)
    return expected, observed


def _chromosome_sort_key(value):
    text = str(value).replace('chr', '')
    return (0, int(text), text) if text.isdigit() else (1, 0, text)


class GWASPlotter:
    def __init__(self, config: Optional[Dict[str, Any]] = None, plots_dir: str = "plots"):
        self.config = config or {}
        self.plot_config = self.config.get('plotting', {})
        self.gwas_config = self.config.get('gwas', {})
        self.plots_dir = Path(plots_dir)
        self.plots_dir.mkdir(parents=True, exist_ok=True)

        self.setup_plotting_style()

    def setup_plotting_style(self):
        """Setup matplotlib and seaborn style from the plotting config"""
        style = self.plot_config.get('style', 'seaborn')

        plt.rcParams['figure.dpi'] = self.plot_config.get('dpi', 150)
        plt.rcParams['savefig.dpi'] = self.plot_config.get('dpi', 150)
        plt.rcParams['savefig.bbox'] = 'tight'

        if style == 'seaborn':
            sns.set_theme(style="whitegrid", font_scale=1.0)
        else:
            plt.style.use(style)

        self.palette = self.plot_config.get('palette', 'tab20')
        self.line_color = '#D62728'
        self.point_color = '#2E86AB'
        self.file_format = self.plot_config.get('format', 'png')

    def manhattan_plot(self, table: pd.DataFrame, position_column: str = 'Position',
                       pvalue_column: str = 'P.value', chromosome_column: str = 'Chromosome',
                       name: str = 'manhattan_plot', threshold: Optional[float] = None,
                       subdir: Optional[str] = None) -> str:
        """Scatter of -log10(p) along the genome, one colour per chromosome"""
        require_columns(table, [position_column, pvalue_column, chromosome_column],
                        "manhattan_plot")
        p_values = check_pvalues(table[pvalue_column], "manhattan_plot")

        if table[[position_column, chromosome_column]].isna().any().any():
            raise ValidationError("manhattan_plot: chromosome and position must be present for every marker")

        df = pd.DataFrame({
            'chromosome': table[chromosome_column].to_numpy(),
            'position': table[position_column].astype(float).to_numpy(),
            'neg_log10_p': -np.log10(p_values)
        })
        chromosomes = sorted(df['chromosome'].unique(), key=_chromosome_sort_key)

        # Chromosomes laid end to end so positions on different chromosomes do not overlap
        offsets = {}
        running = 0.0
        for chrom in chromosomes:
            offsets[chrom] = running
            running += df.loc[df['chromosome'] == chrom, 'position'].max()
        df['genome_position'] = df['position'] + df['chromosome'].map(offsets)

        colors = sns.color_palette(self.palette, n_colors=len(chromosomes))
        fig, ax = plt.subplots(figsize=(14, 5))

        tick_positions = []
        for color, chrom in zip(colors, chromosomes):
            chrom_data = df[df['chromosome'] == chrom]
            ax.scatter(chrom_data['genome_position'], chrom_data['neg_log10_p'],
                       color=color, s=10, alpha=0.8, label=str(chrom), rasterized=True)
            tick_positions.append(chrom_data['genome_position'].median())

        if threshold is None and self.plot_config.get('significance_line', True):
            threshold = self.gwas_config.get('pvalue_threshold')
        if threshold:
            ax.axhline(y=-np.log10(threshold), color=self.line_color, linestyle='--',
                       alpha=0.8, linewidth=1.2, label=f'p = {threshold:g}')

        ax.set_xticks(tick_positions)
        ax.set_xticklabels([str(c) for c in chromosomes])
        ax.set_xlabel('Chromosome')
        ax.set_ylabel('-log10(p-value)')
        ax.set_title(f'Manhattan Plot ({len(df):,} markers)')
        ax.set_ylim(bottom=0)
        ax.legend(title=chromosome_column, bbox_to_anchor=(1.01, 1), loc='upper left',
                  fontsize=8, markerscale=1.5)

        return self.save_plot(fig, name, subdir or 'manhattan_plots')

    def qq_plot(self, p_values, name: str = 'qq_plot', confidence: float = 0.95,
                subdir: Optional[str] = None) -> str:
        """Observed vs. expected -log10(p) under a uniform(0, 1) null"""
        p_values = check_pvalues(p_values, "qq_plot")
        n = len(p_values)

        expected, observed = qq_coordinates(p_values)
        lambda_gc = calculate_lambda_gc(p_values)

        fig, ax = plt.subplots(figsize=(7, 7))

        ranks = np.arange(1, n + 1)
        lower = -np.log10(stats.beta.ppf((1 + confidence) / 2, ranks, n - ranks + 1))
        upper = -np.log10(stats.beta.ppf((1 - confidence) / 2, ranks, n - ranks + 1))
        ax.fill_between(expected, lower, upper, color='gray', alpha=0.3,
                        label=f'{confidence * 100:.0f}% CI')

        ax.scatter(expected, observed, color=self.point_color, s=12, alpha=0.8)
        max_val = max(expected.max(), observed.max())
        ax.plot([0, max_val], [0, max_val], '--', color=self.line_color, alpha=0.8)

        ax.set_xlabel('Expected -log10(p)')
        ax.set_ylabel('Observed -log10(p)')
        ax.set_title(f'QQ Plot (λ = {lambda_gc:.3f}, N = {n:,})')
        ax.legend(loc='upper left')

        return self.save_plot(fig, name, subdir or 'qq_plots')

    def trait_distribution_plot(self, table: pd.DataFrame, group_column: str,
                                value_column: str, name: Optional[str] = None) -> str:
        """Box plot of one trait per group with the individual points on top"""
        require_columns(table, [group_column, value_column], "trait_distribution_plot")

        fig, ax = plt.subplots(figsize=(8, 5))
        sns.boxplot(data=table, x=group_column, y=value_column, ax=ax,
                    color='#C5C5C5', showfliers=False)
        sns.stripplot(data=table, x=group_column, y=value_column, ax=ax,
                      color=self.point_color, size=4, alpha=0.7)
        ax.set_title(f'{value_column} by {group_column}')

        return self.save_plot(fig, name or f'{value_column}_by_{group_column}', 'phenotype_plots')

    def trait_scatter_plot(self, table: pd.DataFrame, column_a: str, column_b: str,
                           group_column: Optional[str] = None, name: Optional[str] = None) -> str:
        """Scatter of two traits annotated with their Pearson correlation"""
        r = correlation(table, column_a, column_b)

        fig, ax = plt.subplots(figsize=(7, 6))
        sns.scatterplot(data=table, x=column_a, y=column_b, hue=group_column,
                        palette=self.palette if group_column else None, ax=ax, s=30)
        ax.text(0.05, 0.95, f'r = {r:.3f}', transform=ax.transAxes, fontsize=12,
                verticalalignment='top',
                bbox=dict(boxstyle="round,pad=0.3", facecolor="white", alpha=0.8))
        ax.set_title(f'{column_a} vs {column_b}')

        return self.save_plot(fig, name or f'{column_a}_vs_{column_b}', 'phenotype_plots')

    def save_plot(self, fig, name: str, subdir: Optional[str] = None) -> str:
        """Save and close a figure, returning the written path"""
        output_dir = self.plots_dir / subdir if subdir else self.plots_dir
        output_dir.mkdir(parents=True, exist_ok=True)
        output_path = output_dir / f"{name}.{self.file_format}"

        try:
            fig.tight_layout()
            fig.savefig(output_path, format=self.file_format,
                        facecolor='white', edgecolor='none')
        finally:
            plt.close(fig)

        logger.info(f"💾 Saved plot: {output_path}")
        return str(output_path)


def synthesize_manhattan_data(n_snps: int = 1200, n_chromosomes: int = 12,
                              seed: int = 42, n_signals: int = 2) -> pd.DataFrame:
    """Demonstration table with SNP, Chromosome, Position and P.value columns"""
    if n_snps < n_chromosomes:
        raise ValidationError("Need at least one SNP per chromosome")

    rng = np.random.default_rng(seed)
    chromosomes = np.sort(rng.integers(1, n_chromosomes + 1, size=n_snps))
    chromosomes[:n_chromosomes] = np.arange(1, n_chromosomes + 1)
    chromosomes = np.sort(chromosomes)
    positions = rng.integers(1_000, 40_000_000, size=n_snps)

    # 1 - U(0, 1) lies in (0, 1], so every p-value is log-safe
    p_values = 1.0 - rng.random(n_snps)

    for chrom in rng.choice(np.arange(1, n_chromosomes + 1), size=n_signals, replace=False):
        members = np.flatnonzero(chromosomes == chrom)
        peak = rng.choice(members, size=min(5, len(members)), replace=False)
        p_values[peak] = 10 ** -rng.uniform(4, 8, size=len(peak))

    df = pd.DataFrame({
        'SNP': [f"SNP{i + 1:05d}" for i in range(n_snps)],
        'Chromosome': chromosomes,
        'Position': positions,
        'P.value': p_values
    })
    return df.sort_values(['Chromosome', 'Position']).reset_index(drop=True)


def manhattan_plot(table, position_column='Position', pvalue_column='P.value',
                   chromosome_column='Chromosome', plots_dir='plots', config=None, **kwargs):
    """Draw a Manhattan plot with a default-styled plotter"""
    plotter = GWASPlotter(config, plots_dir)
    return plotter.manhattan_plot(table, position_column, pvalue_column,
                                  chromosome_column, **kwargs)


def qq_plot(p_values, plots_dir='plots', config=None, **kwargs):
    """Draw a QQ plot with a default-styled plotter"""
    return GWASPlotter(config, plots_dir).qq_plot(p_values, **kwargs)
