#!/usr/bin/env python3
"""
Day 3 - Running a GWAS
Author: Dr. Vijay Singh
Email: vijay.s.gautam@gmail.com

Tests the configured trait (Height by default) against every marker in
data/genotype_data.csv with the leading principal components as covariates,
then reports markers below the p-value threshold and plots the results.

Usage: python day3_run_gwas.py
"""

from gwas_course.pipeline import start_session, run_gwas, report_gwas


def main():
    config, dir_manager = start_session('day3_run_gwas')
    association = run_gwas(config, dir_manager)
    report = report_gwas(config, dir_manager, association['results'])

    summary = report['summary']
    print(f"\n✅ Day 3 complete: {summary['total_markers']} markers tested for "
          f"{association['trait']} with {association['pca_total']} PCs")
    if association['result_file']:
        print(f"   💾 {association['result_file']}")
    if report['summary_file']:
        print(f"   📝 {report['summary_file']}")
    for plot in report['plots']:
        print(f"   🖼️  {plot}")


if __name__ == "__main__":
    main()
