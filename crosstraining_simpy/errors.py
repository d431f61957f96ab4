"""
Errores del modelo de simulación.
"""


class ConfigurationError(ValueError):
    """
    Modelo inválido: vector de calificaciones mal formado, ruta sin ningún
    trabajador calificado, regla de despacho no implementada, etc.

    Siempre es fatal: indica que el modelo está mal construido, no una
    condición de ejecución que se pueda reintentar.
    """
