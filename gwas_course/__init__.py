"""
GWAS Course - phenotype exploration, association testing and result plots
Author: Dr. Vijay Singh
Email: vijay.s.gautam@gmail.com
"""

__version__ = "1.0.0"
__author__ = "Dr. Vijay Singh"
__email__ = "vijay.s.gautam@gmail.com"
