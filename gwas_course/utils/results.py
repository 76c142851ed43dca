#!/usr/bin/env python3
"""
Filtering and reporting of association results
Author: Dr. Vijay Singh
Email: vijay.s.gautam@gmail.com
"""

import logging
from pathlib import Path

import pandas as pd

from gwas_course.utils.association import calculate_lambda_gc
from gwas_course.utils.exceptions import ValidationError
from gwas_course.utils.preprocessing import require_columns

logger = logging.getLogger('GWASCourse')

REPORT_THRESHOLDS = (0.05, 1e-3, 1e-5, 5e-8)


def filter_significant(results_table: pd.DataFrame, threshold: float = 0.05,
                       pvalue_column: str = 'P.value') -> pd.DataFrame:
    """Rows with p-value strictly below threshold, in their original order"""
    require_columns(results_table, [pvalue_column], "filter_significant")
    if not 0 < threshold <= 1:
        raise ValidationError(f"threshold must be in (0, 1], got {threshold}")

    significant = results_table[results_table[pvalue_column] < threshold].copy()
    logger.info(f"🎯 {len(significant)} of {len(results_table)} markers with "
                f"{pvalue_column} < {threshold:g}")
    return significant


def report_significant(results_table: pd.DataFrame, threshold: float = 0.05,
                       n: int = 10, pvalue_column: str = 'P.value') -> pd.DataFrame:
    """Print and return the leading n significant rows"""
    significant = filter_significant(results_table, threshold, pvalue_column)
    leading = significant.head(n)

    print(f"\nMarkers with {pvalue_column} < {threshold:g}: {len(significant)}")
    if leading.empty:
        print("  (none)")
    else:
        print(leading.to_string(index=False))
    return leading


def top_hits(results_table: pd.DataFrame, n: int = 5,
             pvalue_column: str = 'P.value') -> pd.DataFrame:
    """The n markers with the smallest p-values"""
    require_columns(results_table, [pvalue_column], "top_hits")
    hits = results_table.nsmallest(n, pvalue_column)

    for _, hit in hits.iterrows():
        logger.info(f"   {hit.get('SNP', 'unknown')}: p = {hit[pvalue_column]:.2e}, "
                    f"effect = {hit.get('effect', 'N/A')}")
    return hits


def bonferroni_threshold(n_tests: int, alpha: float = 0.05) -> float:
    """Per-marker threshold controlling family-wise error at alpha"""
    if n_tests < 1:
        raise ValidationError("Bonferroni threshold needs at least one test")
    return alpha / n_tests


def summarize_results(results_table: pd.DataFrame, pvalue_column: str = 'P.value') -> dict:
    """Counts at the standard thresholds, Bonferroni count and lambda GC"""
    require_columns(results_table, [pvalue_column], "summarize_results")
    p_values = results_table[pvalue_column].dropna()

    summary = {
        'total_markers': int(len(results_table)),
        'significant_counts': {
            f"p<{t:g}": int((p_values < t).sum()) for t in REPORT_THRESHOLDS
        }
    }

    if len(p_values) > 0:
        bonferroni = bonferroni_threshold(len(p_values))
        summary['bonferroni_threshold'] = bonferroni
        summary['bonferroni_significant'] = int((p_values < bonferroni).sum())
        summary['min_p'] = float(p_values.min())
        summary['lambda_gc'] = calculate_lambda_gc(p_values.to_numpy())

        lambda_gc = summary['lambda_gc']
        if lambda_gc > 1.05:
            logger.warning(f"⚠️ Lambda GC = {lambda_gc:.3f} suggests inflation")
        else:
            logger.info(f"📊 Lambda GC = {lambda_gc:.3f}")

    if 'FDR_Adjusted_P' in results_table.columns:
        summary['fdr_significant'] = int((results_table['FDR_Adjusted_P'] < 0.05).sum())

    return summary


def write_summary_report(summary: dict, output_file, title: str = "GWAS Summary Statistics") -> str:
    """Write a plain-text summary of an association run"""
    output_file = Path(output_file)
    output_file.parent.mkdir(parents=True, exist_ok=True)

    with open(output_file, 'w') as f:
        f.write(f"{title}\n")
        f.write("=" * 50 + "\n\n")
        f.write(f"Total markers tested: {summary.get('total_markers', 'N/A')}\n")

        for label, count in summary.get('significant_counts', {}).items():
            f.write(f"  {label}: {count}\n")

        if 'bonferroni_threshold' in summary:
            f.write(f"Bonferroni threshold: {summary['bonferroni_threshold']:.2e} "
                    f"({summary['bonferroni_significant']} markers)\n")
        if 'fdr_significant' in summary:
            f.write(f"FDR < 0.05: {summary['fdr_significant']} markers\n")
        if 'lambda_gc' in summary:
            f.write(f"Genomic control lambda: {summary['lambda_gc']:.3f}\n")

            f.write("\nInterpretation:\n")
            f.write("-" * 40 + "\n")
            lambda_gc = summary['lambda_gc']
            if lambda_gc < 0.95:
                f.write("Lambda < 0.95 may indicate conservative test statistics\n")
            elif lambda_gc > 1.05:
                f.write("Lambda > 1.05 may indicate inflation; consider more PCs\n")
            else:
                f.write("Lambda between 0.95-1.05 suggests well-controlled statistics\n")

    logger.info(f"💾 Summary report saved: {output_file}")
    return str(output_file)
