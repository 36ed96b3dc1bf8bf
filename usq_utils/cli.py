"""
Command line access to the USQ metadata store
"""

import argparse
import logging
import sys

from usq_utils.config import CONFIG
from usq_utils.data_processing.utils import read_id_file, save_results
from usq_utils.errors import USQError
from usq_utils.metadata.accessor import get_metadata
from usq_utils.metadata.store import load_metadata_store
from usq_utils.metadata.summary import plot_subtype_distribution

logger = logging.getLogger('usq_metadata')

CLI_SHAPES = ['tidy', 'raw', 'publication', 'expressions_only', 'change_log']


def parse_args(argv=None):
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(description='Retrieve USQ metadata or expression subsets')
    parser.add_argument('--base-path', type=str, default=CONFIG['base_path'],
                        help='Directory holding the metadata store files')
    parser.add_argument('--return-shape', type=str, default='tidy', choices=CLI_SHAPES,
                        help='Shape of the result (default: tidy)')
    parser.add_argument('--category-group', type=str, default='uc_index_high_quality',
                        help="Sample category group, or 'none' for no filtering")
    parser.add_argument('--sample-ids', nargs='+', default=None,
                        help='Explicit sample IDs (override --category-group)')
    parser.add_argument('--sample-id-file', type=str, default=None,
                        help='File with one sample ID per line')
    parser.add_argument('--run-classifier', action='store_true',
                        help='Join LundTaxR subtype predictions')
    parser.add_argument('--gene-id', type=str, default='hgnc_symbol',
                        help='Gene identifier scheme: hgnc_symbol or ensembl_gene_id')
    parser.add_argument('--output', type=str, default=None,
                        help='Write the result to this CSV file instead of stdout')
    parser.add_argument('--plot-dir', type=str, default=None,
                        help='Save a subtype distribution plot here (with --run-classifier)')
    parser.add_argument('--quiet', action='store_true', help='Only log warnings and errors')
    return parser.parse_args(argv)


def main(argv=None):
    """Command-line interface for the metadata accessor."""
    args = parse_args(argv)
    logging.basicConfig(
        level=logging.WARNING if args.quiet else logging.INFO,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
    )

    try:
        sample_ids = args.sample_ids
        if args.sample_id_file:
            sample_ids = (sample_ids or []) + read_id_file(args.sample_id_file)

        store = load_metadata_store(args.base_path)
        result = get_metadata(
            store,
            return_shape=args.return_shape,
            run_classifier=args.run_classifier,
            category_group=args.category_group,
            sample_ids=sample_ids,
            classifier_options={'gene_id': args.gene_id},
            verbose=not args.quiet,
        )
    except USQError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 2

    if args.return_shape == 'change_log':
        result = result.to_frame()
    index = args.return_shape == 'expressions_only'

    if args.plot_dir and args.run_classifier and 'subtype_5_class' in result.columns:
        plot_subtype_distribution(result, args.plot_dir)

    if args.output:
        save_results(result, args.output, index=index)
    else:
        print(result.to_csv(sep='\t', index=index), end='')
    return 0


if __name__ == '__main__':
    sys.exit(main())
