#!/usr/bin/env python3
"""
Script to create the course example data in data/
Height carries a real signal at one marker so day 3 has something to find
"""

import numpy as np
import pandas as pd
from pathlib import Path

N_INDIVIDUALS = 60
N_CHROMOSOMES = 12
MARKERS_PER_CHROMOSOME = 10
CAUSAL_SNP = "SNP0025"
GROUPS = ["A", "B", "C"]


def create_sample_data(data_dir="data", seed=42):
    """Create phenotype, genotype and Manhattan-ready example files"""
    data_dir = Path(data_dir)
    data_dir.mkdir(exist_ok=True)
    rng = np.random.default_rng(seed)

    print("🧬 Creating GWAS course example data...")

    taxa = [f"L{i:03d}" for i in range(1, N_INDIVIDUALS + 1)]
    groups = [GROUPS[i % len(GROUPS)] for i in range(N_INDIVIDUALS)]

    genotypes = create_genotype_file(data_dir / "genotype_data.csv", taxa, groups, rng)
    create_phenotype_file(data_dir / "phenotype_data.csv", taxa, groups, genotypes, rng)
    create_manhattan_file(data_dir / "manhattan_data.csv", rng)

    print("✅ All example data files created successfully!")
    print(f"📁 Data directory: {data_dir.absolute()}")

    print("\n📊 File sizes:")
    for file in sorted(data_dir.glob("*.csv")):
        print(f"  {file.name}: {file.stat().st_size / 1024:.1f} KB")


def create_genotype_file(file_path, taxa, groups, rng):
    """Markers x individuals 0/1/2 dosage table with group-specific allele frequencies"""
    n_markers = N_CHROMOSOMES * MARKERS_PER_CHROMOSOME
    group_index = np.array([GROUPS.index(g) for g in groups])

    # Allele frequencies drift apart between groups to give the PCs some structure
    base_freq = rng.uniform(0.15, 0.5, size=n_markers)
    drift = rng.normal(0, 0.08, size=(len(GROUPS), n_markers))
    freqs = np.clip(base_freq + drift, 0.05, 0.95)

    dosages = rng.binomial(2, freqs[group_index]).astype(float)
    dosages[rng.random(dosages.shape) < 0.012] = np.nan

    marker_map = pd.DataFrame({
        'SNP': [f"SNP{i:04d}" for i in range(1, n_markers + 1)],
        'Chromosome': np.repeat(np.arange(1, N_CHROMOSOMES + 1), MARKERS_PER_CHROMOSOME),
        'Position': np.tile(np.arange(1, MARKERS_PER_CHROMOSOME + 1) * 2_500_000, N_CHROMOSOMES)
                    + rng.integers(0, 1_000_000, size=n_markers)
    })
    calls = pd.DataFrame(dosages.T, columns=taxa).astype('Int64')
    genotypes = pd.concat([marker_map, calls], axis=1)

    genotypes.to_csv(file_path, index=False, na_rep="NA")
    print(f"✅ Created {file_path.name} with {n_markers} markers and "
          f"{int(np.isnan(dosages).sum())} missing calls")
    return genotypes


def create_phenotype_file(file_path, taxa, groups, genotypes, rng):
    """Height and Yield per individual; Height depends on the causal marker"""
    causal = genotypes.loc[genotypes['SNP'] == CAUSAL_SNP, taxa].iloc[0].astype(float)
    causal = causal.fillna(causal.mean()).to_numpy()

    group_effect = {"A": 0.0, "B": 3.0, "C": -2.0}
    height = (100 + np.array([group_effect[g] for g in groups])
              + 6.0 * causal + rng.normal(0, 3.0, size=len(taxa)))
    yield_ = 3.0 + 0.03 * (height - 100) + rng.normal(0, 0.3, size=len(taxa))

    phenotypes = pd.DataFrame({
        'Taxa': taxa,
        'Group': groups,
        'Height': np.round(height, 1),
        'Yield': np.round(yield_, 2)
    })

    # A few missing measurements for the cleaning step
    phenotypes.loc[phenotypes['Taxa'].isin(["L017", "L034", "L051"]), 'Height'] = np.nan
    phenotypes.loc[phenotypes['Taxa'].isin(["L023", "L046"]), 'Yield'] = np.nan

    phenotypes.to_csv(file_path, index=False, na_rep="NA")
    print(f"✅ Created {file_path.name} with {len(phenotypes)} individuals")


def create_manhattan_file(file_path, rng, n_snps=600):
    """Plot-ready SNP table with p-values in (0, 0.05] and peaks on chromosomes 3 and 9"""
    chromosomes = np.sort(rng.integers(1, N_CHROMOSOMES + 1, size=n_snps))
    positions = rng.integers(10_000, 60_000_000, size=n_snps)
    p_values = 0.05 * (1.0 - rng.random(n_snps))

    for chrom in (3, 9):
        members = np.flatnonzero(chromosomes == chrom)
        peak = rng.choice(members, size=min(6, len(members)), replace=False)
        p_values[peak] = 10 ** -rng.uniform(5, 9, size=len(peak))

    table = pd.DataFrame({
        'SNP': [f"rs{100000 + i}" for i in range(n_snps)],
        'Chromosome': chromosomes,
        'Position': positions,
        'P.value': p_values
    }).sort_values(['Chromosome', 'Position'])

    table.to_csv(file_path, index=False, float_format="%.6g")
    print(f"✅ Created {file_path.name} with {n_snps} SNPs")


if __name__ == "__main__":
    create_sample_data()
