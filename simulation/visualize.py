# simulation/visualize.py
import os

import matplotlib.pyplot as plt
import networkx as nx
import numpy as np

from config import OUTDIR


def plot_comparison(summary_df, filename="comparison.png", outdir=OUTDIR):
    """
    Compare les protocoles sur le taux de livraison et l'overhead.

    Args:
        summary_df (pd.DataFrame): une ligne par protocole (voir summaries_to_dataframe)
        filename (str): nom du fichier image
        outdir (str): dossier de sortie

    Returns:
        str: chemin du fichier sauvegardé
    """
    fig, axes = plt.subplots(1, 2, figsize=(12, 5))
    names = list(summary_df['protocol'])
    x = np.arange(len(names))

    axes[0].bar(x, summary_df['delivery_prob'], color='royalblue', alpha=0.7)
    axes[0].set_ylabel('Taux de livraison')
    axes[0].set_ylim(0, 1)

    overhead = summary_df['overhead_ratio'].replace(np.inf, np.nan)
    axes[1].bar(x, overhead, color='firebrick', alpha=0.7)
    axes[1].set_ylabel('Overhead ratio')

    for ax in axes:
        ax.set_xticks(x)
        ax.set_xticklabels(names)
        ax.grid(True, linestyle='--', alpha=0.5)
    fig.suptitle('Comparaison des protocoles')
    fig.tight_layout()

    path = os.path.join(outdir, filename)
    fig.savefig(path)
    plt.close(fig)
    return path


def plot_predictabilities(hosts, filename="predictabilities.png", outdir=OUTDIR):
    """
    Affiche la matrice P(i,j) des probabilités de livraison des nœuds.

    Args:
        hosts (list(DTNHost)): nœuds dont le routeur possède une table `store`
        filename (str): nom du fichier image
        outdir (str): dossier de sortie

    Returns:
        str: chemin du fichier sauvegardé
    """
    index = {host: i for i, host in enumerate(hosts)}
    matrix = np.zeros((len(hosts), len(hosts)))
    for host in hosts:
        for other, p in host.router.store.predictions().items():
            if other in index:
                matrix[index[host], index[other]] = p

    plt.figure(figsize=(10, 8))
    plt.imshow(matrix, cmap='viridis', interpolation='none', vmin=0, vmax=1)
    plt.colorbar(label='Probabilité')
    plt.xlabel('Nœud destination')
    plt.ylabel('Nœud source')
    plt.title('Probabilités de livraison')

    path = os.path.join(outdir, filename)
    plt.savefig(path)
    plt.close()
    return path


def plot_contact_snapshot(world, filename="contacts.png", outdir=OUTDIR):
    """
    Dessine les nœuds et leurs connexions actives à l'instant courant.

    La taille d'un nœud est proportionnelle à son nombre de messages.

    Returns:
        str: chemin du fichier sauvegardé
    """
    G = nx.Graph()
    for host in world.hosts:
        G.add_node(host.address, pos=tuple(host.location))
    for con in world.connections.values():
        G.add_edge(con.host_a.address, con.host_b.address,
                   busy=con.is_transferring())

    pos = nx.get_node_attributes(G, 'pos')
    sizes = [30 + 10 * world.get_host(n).router.nrof_messages() for n in G.nodes()]
    edge_colors = ['red' if G[u][v]['busy'] else 'gray' for u, v in G.edges()]

    plt.figure(figsize=(10, 10))
    nx.draw_networkx(G, pos, node_size=sizes, edge_color=edge_colors,
                     with_labels=True, font_size=7)
    plt.title(f'Contacts à t={world.clock.time:.0f}')
    plt.axis('equal')

    path = os.path.join(outdir, filename)
    plt.savefig(path)
    plt.close()
    return path
