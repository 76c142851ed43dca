#!/usr/bin/env python3
"""
Day 1 - Exploring phenotype data
Author: Dr. Vijay Singh
Email: vijay.s.gautam@gmail.com

Loads data/phenotype_data.csv, drops individuals with missing trait values,
prints group means and the Height/Yield correlation, and saves box plots and
a trait scatter plot under results/visualization/phenotype_plots.

Usage: python day1_explore_phenotypes.py
"""

from gwas_course.pipeline import start_session, explore_phenotypes


def main():
    config, dir_manager = start_session('day1_explore_phenotypes')
    outcome = explore_phenotypes(config, dir_manager)

    print(f"\n✅ Day 1 complete: {outcome['n_clean']} of {outcome['n_raw']} individuals analysed")
    for plot in outcome['plots']:
        print(f"   🖼️  {plot}")


if __name__ == "__main__":
    main()
