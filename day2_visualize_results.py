#!/usr/bin/env python3
"""
Day 2 - Visualising GWAS results
Author: Dr. Vijay Singh
Email: vijay.s.gautam@gmail.com

Draws a Manhattan plot and a QQ plot from data/manhattan_data.csv. When the
file is absent a demonstration table is synthesised instead (set
plotting.synthesize_if_missing to false to make that an error).

Usage: python day2_visualize_results.py
"""

from gwas_course.pipeline import start_session, visualize_manhattan_data


def main():
    config, dir_manager = start_session('day2_visualize_results')
    outcome = visualize_manhattan_data(config, dir_manager)

    print("\n✅ Day 2 complete")
    print(f"   🖼️  {outcome['manhattan_plot']}")
    print(f"   🖼️  {outcome['qq_plot']}")


if __name__ == "__main__":
    main()
