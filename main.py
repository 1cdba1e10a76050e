# main.py
import argparse
import logging
import os
import sys

import pandas as pd

from config import CONFIG, OUTDIR, END_TIME, SEED
from simulation.metrics import comparison_table, summaries_to_dataframe
from simulation.scenario import ROUTERS, build_world
from simulation.visualize import plot_comparison, plot_contact_snapshot, plot_predictabilities
from traces.loader import generate_random_trace, load_trace

logger = logging.getLogger(__name__)


def parse_arguments(argv=None):
    """
    Analyse les arguments de ligne de commande.

    Returns:
        argparse.Namespace: Arguments analysés
    """
    parser = argparse.ArgumentParser(
        description="Comparaison du routeur à utilité avec Spray-and-Wait et PRoPHET"
    )
    parser.add_argument('--trace', type=str, default=None,
                        help='Fichier CSV de positions (time,host,x,y). '
                             'Sans trace, une marche aléatoire est générée.')
    parser.add_argument('--hosts', type=int, default=CONFIG['Group']['nrof_hosts'],
                        help='Nombre de nœuds de la trace synthétique')
    parser.add_argument('--end-time', type=float, default=END_TIME,
                        help='Durée de la simulation (s)')
    parser.add_argument('--seed', type=int, default=SEED,
                        help='Graine aléatoire')
    parser.add_argument('--routers', nargs='+', choices=sorted(ROUTERS),
                        default=['utility', 'spray', 'prophet'],
                        help='Protocoles à comparer')
    parser.add_argument('--copies', type=int, default=None,
                        help='Nombre initial de copies (Utility et Spray-and-Wait)')
    parser.add_argument('--buffer', type=int, default=None,
                        help='Capacité des buffers (octets)')
    parser.add_argument('--range', type=float, default=None,
                        help='Portée radio (m)')
    parser.add_argument('--output-csv', type=str, default=os.path.join(OUTDIR, "summary.csv"),
                        help='Fichier CSV des métriques agrégées')
    parser.add_argument('--plot', action='store_true',
                        help='Sauvegarder les graphiques dans le dossier de sortie')
    parser.add_argument('--verbose', action='store_true',
                        help='Journalisation détaillée (DEBUG)')
    return parser.parse_args(argv)


def apply_arguments(args):
    """Reporte les options de ligne de commande dans la configuration."""
    CONFIG['Scenario']['end_time'] = args.end_time
    CONFIG['Scenario']['seed'] = args.seed
    if args.copies is not None:
        CONFIG['UtilityRouter']['nrofCopies'] = args.copies
        CONFIG['SprayAndWaitRouter']['nrofCopies'] = args.copies
    if args.buffer is not None:
        CONFIG['Group']['buffer_size'] = args.buffer
    if args.range is not None:
        CONFIG['Scenario']['transmit_range'] = args.range


def main(argv=None):
    """Point d'entrée principal du programme."""
    args = parse_arguments(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format='%(asctime)s - %(levelname)s - %(message)s',
        datefmt='%Y-%m-%d %H:%M:%S'
    )
    apply_arguments(args)

    # Chargement ou génération de la trace
    if args.trace:
        trace = load_trace(args.trace)
    else:
        print(f"### Génération d'une trace aléatoire ({args.hosts} nœuds) ###")
        trace = generate_random_trace(args.hosts, args.end_time,
                                      CONFIG['Scenario']['world_size'], seed=args.seed)

    print(f"### Simulation de {len(args.routers)} protocole(s) sur {args.end_time:.0f} s ###")
    reports = []
    worlds = {}
    for name in args.routers:
        world, report = build_world(name, trace)
        world.run(args.end_time, progress=True, desc=report.name)
        worlds[name] = world
        reports.append(report)
        logger.info("%s: %d messages livrés sur %d", report.name,
                    len(report.delivered), len(report.created))

    print("\n### Comparaison des protocoles ###")
    print(comparison_table(reports))

    # Export CSV
    summary_df = summaries_to_dataframe(reports)
    os.makedirs(os.path.dirname(args.output_csv) or '.', exist_ok=True)
    summary_df.to_csv(args.output_csv, index=False)
    print(f"  - Métriques agrégées exportées vers {args.output_csv}")

    messages_df = pd.concat([r.to_dataframe() for r in reports], ignore_index=True)
    messages_path = os.path.join(OUTDIR, "message_logs.csv")
    messages_df.to_csv(messages_path, index=False)
    print(f"  - {len(messages_df)} logs de messages exportés vers {messages_path}")

    if args.plot:
        print(f"  - Graphique sauvegardé dans {plot_comparison(summary_df)}")
        if 'utility' in worlds:
            world = worlds['utility']
            print(f"  - Graphique sauvegardé dans {plot_predictabilities(world.hosts)}")
            print(f"  - Graphique sauvegardé dans {plot_contact_snapshot(world)}")

    print("\n### Analyse terminée ###")
    return 0


if __name__ == "__main__":
    sys.exit(main())
